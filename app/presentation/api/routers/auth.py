import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from ....application.services.account_service import AccountService
from ....application.services.upload_service import UploadAdmissionPipeline
from ....core.dependencies import get_account_service, get_upload_pipeline
from ...api.errors import validation_failed
from ...api.forms import read_multipart
from ...api.schemas.profile import LoginInput, RegistrationInput
from ...api.serializers import serialize_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: Request,
    accounts: AccountService = Depends(get_account_service),
    uploads: UploadAdmissionPipeline = Depends(get_upload_pipeline),
) -> Dict[str, Any]:
    fields, upload = await read_multipart(request, uploads.field_name)

    picture = None
    if upload is not None:
        try:
            picture = await uploads.admit(upload)
        finally:
            await upload.close()

    # From here on a stored picture must not outlive a failed registration.
    try:
        try:
            payload = RegistrationInput.model_validate(fields)
        except ValidationError as exc:
            raise validation_failed(exc) from exc
        user, token = await run_in_threadpool(accounts.register, payload.to_attributes(), picture)
    except Exception:
        if picture is not None:
            await uploads.delete_stored(picture)
        raise

    return {"success": True, "token": token, "user": serialize_user(user)}


@router.post("/login")
async def login(
    payload: LoginInput,
    accounts: AccountService = Depends(get_account_service),
) -> Dict[str, Any]:
    user, token = await run_in_threadpool(accounts.authenticate, payload.email, payload.password)
    return {"success": True, "token": token, "user": serialize_user(user)}
