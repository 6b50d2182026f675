from fastapi import APIRouter, Depends

from core.dependencies import get_dashboard_service, get_session_context
from core.security import SessionContext
from schemas.dashboard import DashboardSummary
from services.dashboard_service import DashboardService

router = APIRouter()


@router.get("/", response_model=DashboardSummary)
def get_dashboard(
    ctx: SessionContext = Depends(get_session_context),
    service: DashboardService = Depends(get_dashboard_service)
):
    """Summary cards and daily sales for the caller's branch"""
    return service.get_summary(ctx)
