"""
New-branch setup wizard.

Each session walks the steps in order, accumulating a WizardState that is
POSTed once to the remote API. A failed submission keeps the state; a
successful one resets the session to an empty first step.
"""
import threading
import uuid
from datetime import timedelta
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from clients.restaurant_api import RestaurantApiClient
from config.logging import get_logger
from config.settings import get_settings
from core.exceptions import BadRequestError, ErrorDetail, NotFoundError, WizardStepError, error_details
from core.security import SessionContext
from schemas.wizard import (
    STEP_FORMS, STEP_ORDER, CategoriesStep, ProductsStep, RolesStep,
    TableEntry, UsersStep, WizardReview, WizardSessionResponse, WizardState,
    WizardStep
)
from utils.date_utils import now_local

logger = get_logger(__name__)
settings = get_settings()

BUILT_IN_USER_ROLES = ("manager", "user")


def generate_tables(count: int) -> List[TableEntry]:
    """3 -> T-1, T-2, T-3"""
    return [TableEntry(table_name=f"T-{i}") for i in range(1, count + 1)]


class WizardSession:
    """One user's pass through the wizard."""

    def __init__(self, owner_id: str, session_id: Optional[str] = None):
        self.session_id = session_id or uuid.uuid4().hex
        self.owner_id = owner_id
        self.step_index = 0
        self.state = WizardState()
        self.submitting = False
        self.updated_at = now_local()

    @property
    def step(self) -> WizardStep:
        return STEP_ORDER[self.step_index]

    def _touch(self) -> None:
        self.updated_at = now_local()

    def advance(self, step: WizardStep, patch: Dict[str, Any]) -> None:
        """Validate the step's form, merge it into the state and move on."""
        if step != self.step:
            raise WizardStepError(step.value, f"Expected step '{self.step.value}', got '{step.value}'")
        if step == WizardStep.REVIEW:
            raise WizardStepError(step.value, "The review step is completed by submitting the wizard")

        try:
            form = STEP_FORMS[step].model_validate(patch or {})
        except PydanticValidationError as e:
            raise WizardStepError(step.value, f"Invalid {step.value} data", error_details(e.errors()))

        self._merge(step, form)
        self.step_index += 1
        self._touch()

    def back(self) -> None:
        """Move one step back; accumulated data is kept."""
        if self.step_index > 0:
            self.step_index -= 1
            self._touch()

    def reset(self) -> None:
        self.step_index = 0
        self.state = WizardState()
        self._touch()

    def _merge(self, step: WizardStep, form) -> None:
        state = self.state
        if step == WizardStep.COMPANY:
            state.company = form
        elif step == WizardStep.CATEGORIES:
            state.categories = self._clean_categories(form)
        elif step == WizardStep.PRODUCTS:
            state.products = self._clean_products(form)
        elif step == WizardStep.TABLES:
            state.tables = generate_tables(form.count)
        elif step == WizardStep.ROLES:
            state.roles = self._clean_roles(form)
        elif step == WizardStep.USERS:
            state.users = self._clean_users(form)

    @staticmethod
    def _clean_categories(form: CategoriesStep):
        categories = [c for c in form.categories if c.category_name]
        for position, category in enumerate(categories, start=1):
            if category.serial is None:
                category.serial = position
        return categories

    def _clean_products(self, form: ProductsStep):
        products = [p for p in form.products if p.product_name]
        self._check_product_categories(products)
        return products

    def _check_product_categories(self, products) -> None:
        known = {c.category_name for c in self.state.categories}
        errors = [
            ErrorDetail(
                code="UNKNOWN_CATEGORY",
                message=f"Category '{p.category}' is not defined",
                field=f"products.{index}.category",
            )
            for index, p in enumerate(products)
            if p.category not in known
        ]
        if errors:
            raise WizardStepError(WizardStep.PRODUCTS.value, "Products must use a defined category", errors)

    @staticmethod
    def _clean_roles(form: RolesStep):
        roles, seen = [], set()
        for role in form.roles:
            if role.role_name and role.role_name not in seen:
                seen.add(role.role_name)
                roles.append(role)
        return roles

    def _clean_users(self, form: UsersStep):
        self._check_users(form.users)
        return list(form.users)

    def allowed_user_roles(self) -> List[str]:
        return list(BUILT_IN_USER_ROLES) + [r.role_name for r in self.state.roles]

    def _check_users(self, users) -> None:
        allowed = set(self.allowed_user_roles())
        errors = [
            ErrorDetail(
                code="UNKNOWN_ROLE",
                message=f"Role '{user.role}' is not available for this branch",
                field=f"users.{index}.role",
            )
            for index, user in enumerate(users)
            if user.role not in allowed
        ]
        if not any(user.role == "manager" for user in users):
            errors.append(ErrorDetail(code="MANAGER_REQUIRED", message="At least one manager is required", field="users"))
        if errors:
            raise WizardStepError(WizardStep.USERS.value, "Invalid branch users", errors)

    def validate_complete(self) -> None:
        """Re-check cross-step rules; earlier steps may have changed after a back()."""
        if self.step != WizardStep.REVIEW:
            raise WizardStepError(self.step.value, "Complete every step before submitting")
        if self.state.company is None:
            raise WizardStepError(WizardStep.COMPANY.value, "Company information is required")
        self._check_product_categories(self.state.products)
        self._check_users(self.state.users)

    def review(self) -> WizardReview:
        company = self.state.company
        return WizardReview(
            company_name=company.name if company else "",
            branch=company.branch if company else "",
            categories=len(self.state.categories),
            products=len(self.state.products),
            tables=len(self.state.tables),
            roles=len(self.state.roles),
            users=len(self.state.users),
        )

    def to_response(self) -> WizardSessionResponse:
        state = self.state.to_payload()
        for user in state["users"]:
            user["password"] = "********"
        return WizardSessionResponse(
            session_id=self.session_id,
            step=self.step,
            step_index=self.step_index,
            total_steps=len(STEP_ORDER),
            state=state,
            updated_at=self.updated_at,
        )


class WizardStore:
    """In-process session store; a session is only visible to its owner.

    Sessions idle for longer than ttl_seconds are evicted on the next create or get.
    """

    def __init__(self, ttl_seconds: Optional[int] = None):
        self.lock = threading.Lock()
        self.ttl = timedelta(seconds=ttl_seconds if ttl_seconds is not None else settings.WIZARD_SESSION_TTL_SECONDS)
        self._sessions: Dict[str, WizardSession] = {}

    def _evict_expired(self) -> None:
        cutoff = now_local() - self.ttl
        expired = [
            session_id for session_id, session in self._sessions.items()
            if session.updated_at < cutoff and not session.submitting
        ]
        for session_id in expired:
            del self._sessions[session_id]
        if expired:
            logger.info(f"Evicted {len(expired)} idle wizard sessions")

    def create(self, owner_id: str) -> WizardSession:
        session = WizardSession(owner_id)
        with self.lock:
            self._evict_expired()
            self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str, owner_id: str) -> WizardSession:
        with self.lock:
            self._evict_expired()
            session = self._sessions.get(session_id)
        if session is None or session.owner_id != owner_id:
            raise NotFoundError("Wizard session", session_id)
        return session

    def delete(self, session_id: str, owner_id: str) -> None:
        self.get(session_id, owner_id)
        with self.lock:
            self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._sessions)


class WizardService:
    """Drives wizard sessions and the single setup submission."""

    SUBMIT_PATH = "/branch/setup-wizard"

    def __init__(self, api: RestaurantApiClient, store: WizardStore):
        self.api = api
        self.store = store

    def start(self, ctx: SessionContext) -> WizardSession:
        session = self.store.create(ctx.user_id)
        logger.info(f"User {ctx.user_id} started wizard session {session.session_id}")
        return session

    def get(self, ctx: SessionContext, session_id: str) -> WizardSession:
        return self.store.get(session_id, ctx.user_id)

    def advance(self, ctx: SessionContext, session_id: str, step: WizardStep, patch: Dict[str, Any]) -> WizardSession:
        session = self.get(ctx, session_id)
        with self.store.lock:
            if session.submitting:
                raise BadRequestError("Wizard is being submitted", field="step")
            session.advance(step, patch)
        return session

    def back(self, ctx: SessionContext, session_id: str) -> WizardSession:
        session = self.get(ctx, session_id)
        with self.store.lock:
            session.back()
        return session

    def review(self, ctx: SessionContext, session_id: str) -> WizardReview:
        return self.get(ctx, session_id).review()

    def discard(self, ctx: SessionContext, session_id: str) -> None:
        self.store.delete(session_id, ctx.user_id)

    def submit(self, ctx: SessionContext, session_id: str) -> WizardSession:
        session = self.get(ctx, session_id)
        with self.store.lock:
            if session.submitting:
                raise BadRequestError("Wizard is already being submitted")
            session.validate_complete()
            session.submitting = True
            payload = session.state.to_payload()

        try:
            self.api.post(self.SUBMIT_PATH, ctx.token, json=payload)
        except Exception:
            logger.warning(f"Wizard session {session_id} submission failed; state kept")
            with self.store.lock:
                session.submitting = False
            raise

        with self.store.lock:
            company_name = session.state.company.name if session.state.company else ""
            session.reset()
            session.submitting = False
        logger.info(f"Branch '{company_name}' created from wizard session {session_id} by {ctx.user_id}")
        return session
