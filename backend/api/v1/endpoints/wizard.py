from fastapi import APIRouter, Depends

from core.dependencies import get_session_context, get_wizard_service
from core.security import SessionContext
from schemas.wizard import StepSubmission, WizardReview, WizardSessionResponse, WizardSubmitResponse
from services.wizard_service import WizardService

router = APIRouter()


@router.post("/", response_model=WizardSessionResponse, status_code=201)
def start_wizard(
    ctx: SessionContext = Depends(get_session_context),
    service: WizardService = Depends(get_wizard_service)
):
    """Open a new branch setup session"""
    return service.start(ctx).to_response()


@router.get("/{session_id}", response_model=WizardSessionResponse)
def get_wizard(
    session_id: str,
    ctx: SessionContext = Depends(get_session_context),
    service: WizardService = Depends(get_wizard_service)
):
    return service.get(ctx, session_id).to_response()


@router.post("/{session_id}/steps", response_model=WizardSessionResponse)
def submit_step(
    session_id: str,
    submission: StepSubmission,
    ctx: SessionContext = Depends(get_session_context),
    service: WizardService = Depends(get_wizard_service)
):
    """Validate the current step's form and move forward"""
    return service.advance(ctx, session_id, submission.step, submission.data).to_response()


@router.post("/{session_id}/back", response_model=WizardSessionResponse)
def step_back(
    session_id: str,
    ctx: SessionContext = Depends(get_session_context),
    service: WizardService = Depends(get_wizard_service)
):
    return service.back(ctx, session_id).to_response()


@router.get("/{session_id}/review", response_model=WizardReview)
def review_wizard(
    session_id: str,
    ctx: SessionContext = Depends(get_session_context),
    service: WizardService = Depends(get_wizard_service)
):
    """Counts of everything collected so far"""
    return service.review(ctx, session_id)


@router.post("/{session_id}/submit", response_model=WizardSubmitResponse)
def submit_wizard(
    session_id: str,
    ctx: SessionContext = Depends(get_session_context),
    service: WizardService = Depends(get_wizard_service)
):
    """Send the collected setup to the remote API in one request"""
    session = service.submit(ctx, session_id)
    return WizardSubmitResponse(success=True, message="Branch setup completed", session=session.to_response())


@router.delete("/{session_id}")
def discard_wizard(
    session_id: str,
    ctx: SessionContext = Depends(get_session_context),
    service: WizardService = Depends(get_wizard_service)
):
    service.discard(ctx, session_id)
    return {"success": True, "message": "Wizard session discarded"}
