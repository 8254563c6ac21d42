from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from rental_admin.auth.admin_cache import AdminRoleCache
from rental_admin.auth.errors import AdminRegistryError
from rental_admin.common.system_logger import get_logger
from rental_admin.dependencies import get_admin_cache, get_admin_registry
from rental_admin.models.auth import AdminCreate, AdminRecord, AdminUpdate
from rental_admin.services.admin_registry import AdminRegistry

router = APIRouter(prefix="/admin", tags=["admin"])
logger = get_logger()


def _server_error() -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def _not_found() -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "Admin not found"})


@router.get("", response_model=list[AdminRecord])
async def list_admins(registry: AdminRegistry = Depends(get_admin_registry)):
    try:
        return await registry.list_admins()
    except AdminRegistryError:
        logger.error("Failed to list admins", exc_info=True)
        return _server_error()


@router.post("", response_model=AdminRecord, status_code=201)
async def create_admin(
    body: AdminCreate,
    registry: AdminRegistry = Depends(get_admin_registry),
    admin_cache: AdminRoleCache = Depends(get_admin_cache),
):
    try:
        admin = await registry.create_admin(body)
    except AdminRegistryError:
        logger.error("Failed to create admin %s", body.user_id, exc_info=True)
        return _server_error()
    admin_cache.invalidate(body.user_id)
    logger.info("Admin created: %s (%s)", admin.email, admin.role)
    return admin


@router.get("/{user_id}", response_model=AdminRecord)
async def get_admin(user_id: str, registry: AdminRegistry = Depends(get_admin_registry)):
    try:
        admin = await registry.get_admin_by_user_id(user_id)
    except AdminRegistryError:
        logger.error("Failed to fetch admin %s", user_id, exc_info=True)
        return _server_error()
    if admin is None:
        return _not_found()
    return admin


@router.patch("/{user_id}", response_model=AdminRecord)
async def update_admin(
    user_id: str,
    body: AdminUpdate,
    registry: AdminRegistry = Depends(get_admin_registry),
    admin_cache: AdminRoleCache = Depends(get_admin_cache),
):
    try:
        admin = await registry.update_admin(user_id, body)
    except AdminRegistryError:
        logger.error("Failed to update admin %s", user_id, exc_info=True)
        return _server_error()
    admin_cache.invalidate(user_id)
    if admin is None:
        return _not_found()
    return admin


@router.delete("/{user_id}")
async def delete_admin(
    user_id: str,
    registry: AdminRegistry = Depends(get_admin_registry),
    admin_cache: AdminRoleCache = Depends(get_admin_cache),
):
    try:
        removed = await registry.delete_admin(user_id)
    except AdminRegistryError:
        logger.error("Failed to remove admin %s", user_id, exc_info=True)
        return _server_error()
    admin_cache.invalidate(user_id)
    if not removed:
        return _not_found()
    logger.info("Admin removed: %s", user_id)
    return {"message": "Admin removed"}
