from dataclasses import dataclass

from ..application.services.account_service import AccountService
from ..application.services.profile_query_service import ProfileQueryService
from ..application.services.token_service import TokenService
from ..application.services.upload_service import UploadAdmissionPipeline
from ..domain.ports.persistence import PersistenceGateway
from .config import Settings


@dataclass(slots=True)
class ApplicationContainer:
    """Dependency registry shared across the FastAPI application lifecycle."""

    settings: Settings
    persistence: PersistenceGateway
    token_service: TokenService
    upload_pipeline: UploadAdmissionPipeline
    account_service: AccountService
    profile_query_service: ProfileQueryService
