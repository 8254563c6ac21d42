"""Failure types for the authorization pipeline.

None of these ever reach a client: the middleware turns every one of them
into the same redirect or ``401 {"error": "Unauthorized"}``.
"""

from __future__ import annotations

from enum import Enum


class CredentialStoreError(Exception):
    """The credential store could not produce a session."""


class InvalidSessionError(CredentialStoreError):
    """The store rejected the tokens, or answered without a session."""


class CredentialStoreUnavailable(CredentialStoreError):
    """Network error, timeout or 5xx from the store."""


class AdminRegistryError(Exception):
    """A query against the admin registry failed."""


class AuthFailure(str, Enum):
    NO_CREDENTIALS = "no_credentials"
    INVALID_SESSION = "invalid_session"
    STORE_UNAVAILABLE = "store_unavailable"
    NOT_ADMIN = "not_admin"
