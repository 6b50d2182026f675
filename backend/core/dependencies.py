# backend/core/dependencies.py
from fastapi import Depends, Query, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
from functools import lru_cache

from config.settings import get_settings
from config.logging import get_logger, log_security_event
from core.exceptions import UnauthorizedError
from core.security import SecurityEvent, SessionContext, session_from_token
from clients.restaurant_api import RestaurantApiClient
from services.report_service import ReportService
from services.dashboard_service import DashboardService
from services.user_service import UserService
from services.access_policy import ActionPermissions
from services.wizard_service import WizardService, WizardStore
from services.print_service import PrintService, PrintBackend, SpoolPrintBackend, NullPrintBackend

logger = get_logger(__name__)
settings = get_settings()
security = HTTPBearer(auto_error=False)


# Remote API client, shared by the whole application
@lru_cache()
def get_api_client() -> RestaurantApiClient:
    """Get the shared remote API client."""
    return RestaurantApiClient(
        base_url=settings.REMOTE_API_URL,
        timeout=settings.REMOTE_API_TIMEOUT
    )


@lru_cache()
def get_wizard_store() -> WizardStore:
    """Get the in-process wizard session store."""
    return WizardStore(settings.WIZARD_SESSION_TTL_SECONDS)


@lru_cache()
def get_print_backend() -> PrintBackend:
    """Get the print backend for the current settings."""
    if not settings.PRINTING_ENABLED:
        return NullPrintBackend()
    return SpoolPrintBackend(
        directory=settings.PRINT_SPOOL_DIRECTORY,
        ttl_seconds=settings.PRINT_SPOOL_TTL_SECONDS
    )


# Authentication dependencies
def get_session_context(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> SessionContext:
    """Get the authenticated caller's context."""
    if not credentials or not credentials.credentials:
        raise UnauthorizedError()

    ctx = session_from_token(credentials.credentials)
    if ctx is None:
        log_security_event(
            SecurityEvent.UNAUTHORIZED_ACCESS,
            details=f"Rejected token on {request.url.path}",
            ip_address=request.client.host if request.client else None
        )
        raise UnauthorizedError("Invalid authentication credentials")

    request.state.user_id = ctx.user_id
    return ctx


# Service dependencies
def get_report_service(api: RestaurantApiClient = Depends(get_api_client)) -> ReportService:
    return ReportService(api)


def get_dashboard_service(api: RestaurantApiClient = Depends(get_api_client)) -> DashboardService:
    return DashboardService(api)


def get_user_service(api: RestaurantApiClient = Depends(get_api_client)) -> UserService:
    return UserService(api)


def get_action_permissions(
    ctx: SessionContext = Depends(get_session_context),
    api: RestaurantApiClient = Depends(get_api_client)
) -> ActionPermissions:
    return ActionPermissions.load(api, ctx)


def get_wizard_service(
    api: RestaurantApiClient = Depends(get_api_client),
    store: WizardStore = Depends(get_wizard_store)
) -> WizardService:
    return WizardService(api, store)


def get_print_service(backend: PrintBackend = Depends(get_print_backend)) -> PrintService:
    return PrintService(backend)


# Pagination dependency
class PaginationParams:
    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number"),
        limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Page size")
    ):
        self.page = page
        self.limit = min(limit, settings.MAX_PAGE_SIZE)


__all__ = [
    "get_api_client",
    "get_wizard_store",
    "get_print_backend",
    "get_session_context",
    "get_report_service",
    "get_dashboard_service",
    "get_user_service",
    "get_action_permissions",
    "get_wizard_service",
    "get_print_service",
    "PaginationParams"
]
