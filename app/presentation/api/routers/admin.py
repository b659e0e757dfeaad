from typing import Any, Dict

from fastapi import APIRouter, Depends, Query, status
from fastapi.concurrency import run_in_threadpool

from ....application.services.account_service import AccountService
from ....application.services.profile_query_service import (
    ADMIN_LIST_DEFAULT_LIMIT,
    ProfileQueryService,
)
from ....application.services.upload_service import UploadAdmissionPipeline
from ....core.dependencies import (
    get_account_service,
    get_profile_query_service,
    get_upload_pipeline,
)
from ....domain.models import CreatedWindow
from ...api.dependencies import require_admin_header
from ...api.schemas.profile import AdminUserCreate
from ...api.serializers import serialize_user

# SECURITY: every route here trusts the X-Admin-Request header alone.
router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin_header)],
)


@router.get("/stats")
async def admin_stats(
    queries: ProfileQueryService = Depends(get_profile_query_service),
) -> Dict[str, Any]:
    return {"totalUsers": await run_in_threadpool(queries.total_users)}


@router.get("/users")
async def list_users(
    queries: ProfileQueryService = Depends(get_profile_query_service),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=ADMIN_LIST_DEFAULT_LIMIT, ge=1),
    window: CreatedWindow = Query(default=CreatedWindow.RECENT, alias="filter"),
) -> Dict[str, Any]:
    result = await run_in_threadpool(queries.list_for_admin, page, limit, window)
    return {
        "users": [serialize_user(user) for user in result.items],
        "totalUsers": result.total,
        "totalPages": result.total_pages,
        "currentPage": result.page,
        "limit": result.limit,
        "filter": window.value,
    }


@router.post("/users", status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: AdminUserCreate,
    accounts: AccountService = Depends(get_account_service),
) -> Dict[str, Any]:
    user = await run_in_threadpool(accounts.create_offline_user, payload.to_attributes())
    return {"message": "User created successfully", "user": serialize_user(user), "success": True}


@router.get("/users/{user_id}")
async def get_user(
    user_id: str,
    accounts: AccountService = Depends(get_account_service),
) -> Dict[str, Any]:
    user = await run_in_threadpool(accounts.get_user, user_id)
    return {"success": True, "user": serialize_user(user)}


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: str,
    accounts: AccountService = Depends(get_account_service),
    uploads: UploadAdmissionPipeline = Depends(get_upload_pipeline),
) -> Dict[str, Any]:
    user = await run_in_threadpool(accounts.delete_user, user_id)
    await uploads.delete_public_path(user.profile_picture)
    return {"message": "User deleted successfully", "deletedUser": serialize_user(user)}
