import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.concurrency import run_in_threadpool

from ....application.services.account_service import AccountService, parse_record_id
from ....application.services.profile_query_service import (
    PUBLIC_LIST_DEFAULT_LIMIT,
    SEARCH_DEFAULT_LIMIT,
    ProfileQueryService,
    SearchFilters,
)
from ....application.services.upload_service import UploadAdmissionPipeline
from ....core.dependencies import (
    get_account_service,
    get_profile_query_service,
    get_upload_pipeline,
)
from ....domain.errors import Forbidden, ValidationFailed
from ....domain.models import AccessDecision, Identity
from ...api.dependencies import require_access, require_user_identity
from ...api.forms import read_multipart
from ...api.schemas.profile import ProfilePatch, ProfileUpdate
from ...api.serializers import serialize_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profiles", tags=["Profiles"])


# Fixed paths are declared before "/{profile_id}" so they are matched first.
@router.get("/me")
async def get_me(
    identity: Identity = Depends(require_user_identity),
    accounts: AccountService = Depends(get_account_service),
) -> Dict[str, Any]:
    user = await run_in_threadpool(accounts.get_user, identity.subject_id)
    return {"success": True, "user": serialize_user(user)}


@router.put("/me")
async def update_me(
    payload: ProfileUpdate,
    identity: Identity = Depends(require_user_identity),
    accounts: AccountService = Depends(get_account_service),
) -> Dict[str, Any]:
    user = await run_in_threadpool(accounts.update_user, identity.subject_id, payload.to_attributes())
    return {
        "success": True,
        "user": serialize_user(user),
        "message": "Profile updated successfully",
    }


@router.post("/me/upload-picture")
async def upload_picture(
    request: Request,
    decision: AccessDecision = Depends(require_access),
    accounts: AccountService = Depends(get_account_service),
    uploads: UploadAdmissionPipeline = Depends(get_upload_pipeline),
) -> Dict[str, Any]:
    fields, upload = await read_multipart(request, uploads.field_name)
    if upload is None:
        raise ValidationFailed("No file uploaded.", {uploads.field_name: "No file uploaded."})

    if decision.is_admin:
        target_id = fields.get("userId")
        if not target_id:
            raise ValidationFailed(
                "Admin upload request requires userId in body",
                {"userId": "Admin upload request requires userId in body"},
            )
        logger.info("Admin upload request for user ID: %s", target_id)
    else:
        target_id = decision.identity.subject_id

    try:
        picture = await uploads.admit(upload)
    finally:
        await upload.close()

    try:
        user, previous = await run_in_threadpool(accounts.set_profile_picture, target_id, picture)
    except Exception:
        await uploads.delete_stored(picture)
        raise

    if previous and previous != picture.public_path:
        await uploads.delete_public_path(previous)

    return {
        "success": True,
        "message": "Profile picture uploaded successfully",
        "filePath": picture.public_path,
        "user": serialize_user(user),
    }


@router.get("/search")
async def search_profiles(
    decision: AccessDecision = Depends(require_access),
    queries: ProfileQueryService = Depends(get_profile_query_service),
    gender: Optional[str] = Query(default=None),
    min_age: Optional[int] = Query(default=None, alias="minAge", ge=0),
    max_age: Optional[int] = Query(default=None, alias="maxAge", ge=0),
    location: Optional[str] = Query(default=None),
    religion: Optional[str] = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=SEARCH_DEFAULT_LIMIT, ge=1),
) -> Dict[str, Any]:
    filters = SearchFilters(
        gender=gender,
        min_age=min_age,
        max_age=max_age,
        location=location,
        religion=religion,
        page=page,
        limit=limit,
    )
    exclude_id = decision.identity.subject_id if decision.identity else None
    result = await run_in_threadpool(queries.search, filters, exclude_id=exclude_id)
    return {
        "success": True,
        "results": [serialize_user(user) for user in result.items],
        "total": result.total,
        "page": result.page,
        "limit": result.limit,
        "totalPages": result.total_pages,
    }


@router.get("")
@router.get("/", include_in_schema=False)
async def list_profiles(
    queries: ProfileQueryService = Depends(get_profile_query_service),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=PUBLIC_LIST_DEFAULT_LIMIT, ge=1),
) -> Dict[str, Any]:
    result = await run_in_threadpool(queries.list_public, page, limit)
    return {"count": result.total, "profiles": [serialize_user(user) for user in result.items]}


@router.get("/{profile_id}")
async def get_profile(
    profile_id: str,
    _: AccessDecision = Depends(require_access),
    accounts: AccountService = Depends(get_account_service),
) -> Dict[str, Any]:
    profile = await run_in_threadpool(accounts.get_user, profile_id)
    return {"success": True, "profile": serialize_user(profile)}


@router.put("/{profile_id}")
async def patch_profile(
    profile_id: str,
    payload: ProfilePatch,
    decision: AccessDecision = Depends(require_access),
    accounts: AccountService = Depends(get_account_service),
) -> Dict[str, Any]:
    # TODO: restrict role/isVerified/isActive once the intended owner permissions are confirmed.
    record_id = parse_record_id(profile_id)
    if not decision.is_admin and decision.identity.subject_id != record_id:
        raise Forbidden("Unauthorized action")
    profile = await run_in_threadpool(accounts.update_user, record_id, payload.to_attributes())
    return serialize_user(profile)
