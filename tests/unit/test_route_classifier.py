from __future__ import annotations

import pytest

from rental_admin.auth.routes import (
    RouteClassifier,
    api_classifier,
    classify,
    compile_pattern,
    page_classifier,
)


@pytest.mark.parametrize(
    "path",
    ["/dashboard", "/dashboard/", "/orders", "/orders/", "/users", "/users/",
     "/products", "/products/", "/payments-table", "/payments-table/"],
)
def test_dashboard_pages_are_protected(path: str) -> None:
    route = page_classifier().classify(path)
    assert route.is_protected
    assert not route.is_auth_passthrough
    assert not route.is_redirect_if_authed


@pytest.mark.parametrize("path", ["/dashboard/sub", "/dashboard/sub/path", "/dashboards", "/orders/42", "/dashboard//"])
def test_optional_slash_does_not_prefix_match(path: str) -> None:
    assert not page_classifier().classify(path).is_protected


@pytest.mark.parametrize("path", ["/api/auth/login", "/api/auth/logout", "/api/auth/session", "/api/auth/login/"])
def test_auth_endpoints_pass_through(path: str) -> None:
    assert page_classifier().classify(path).is_auth_passthrough
    assert api_classifier().classify(path).is_auth_passthrough


def test_home_redirects_if_authenticated() -> None:
    route = page_classifier().classify("/")
    assert route.is_redirect_if_authed
    assert not route.is_protected
    assert not page_classifier().classify("/about").is_redirect_if_authed


def test_api_classifier_tables() -> None:
    api = api_classifier()
    assert api.classify("/api/guestbook").is_protected
    assert api.classify("/api/guestbook/7").is_protected
    assert api.classify("/api/woo/get-orders").is_protected
    assert not api.classify("/api/health").is_protected

    admin = api.classify("/api/admin/abc")
    assert admin.is_protected and admin.is_admin_only
    assert api.classify("/api/admin").is_admin_only
    assert api.classify("/api/auth/me").is_admin_only
    assert not api.classify("/api/guestbook").is_admin_only
    assert not api.classify("/api/administrators").is_admin_only


def test_api_classifier_never_bounces_home() -> None:
    assert not api_classifier().classify("/").is_redirect_if_authed


def test_flags_are_independent() -> None:
    classifier = RouteClassifier(protected=["/x(|/)"], redirect_if_authed=["/x"])
    route = classifier.classify("/x")
    assert route.is_protected and route.is_redirect_if_authed


def test_glob_semantics() -> None:
    assert compile_pattern("/files/*.pdf").fullmatch("/files/a.pdf")
    assert not compile_pattern("/files/*.pdf").fullmatch("/files/a/b.pdf")
    assert compile_pattern("/files/**").fullmatch("/files/a/b.pdf")
    assert compile_pattern("/files/**").fullmatch("/files")
    assert compile_pattern("/v?").fullmatch("/v1")
    assert not compile_pattern("/v?").fullmatch("/v/")
    assert compile_pattern("/(a|b)/c").fullmatch("/b/c")
    assert compile_pattern("/a.b").fullmatch("/a.b")
    assert not compile_pattern("/a.b").fullmatch("/axb")


def test_unbalanced_pattern_rejected_at_construction() -> None:
    with pytest.raises(ValueError):
        RouteClassifier(protected=["/broken(|/"])


def test_module_level_classify_combines_tables() -> None:
    assert classify("/dashboard").is_protected
    assert classify("/api/admin").is_admin_only
    assert classify("/").is_redirect_if_authed


def test_globstar_between_segments_matches_zero_or_more() -> None:
    pattern = compile_pattern("/reports/**/summary")
    assert pattern.fullmatch("/reports/summary")
    assert pattern.fullmatch("/reports/2024/summary")
    assert pattern.fullmatch("/reports/2024/q1/summary")
    assert not pattern.fullmatch("/reports/summary/extra")
    assert not pattern.fullmatch("/reportssummary")
