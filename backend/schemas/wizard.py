import re
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from decimal import Decimal
from enum import Enum

from config.settings import get_settings

settings = get_settings()

_WHITESPACE = re.compile(r"\s+")


class WizardStep(str, Enum):
    COMPANY = "company"
    CATEGORIES = "categories"
    PRODUCTS = "products"
    TABLES = "tables"
    ROLES = "roles"
    USERS = "users"
    REVIEW = "review"


STEP_ORDER: List[WizardStep] = list(WizardStep)


class WizardModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


def _required(value: str) -> str:
    if not value:
        raise ValueError("must not be blank")
    return value


# Step forms
class CompanyStep(WizardModel):
    name: str = Field(..., max_length=200)
    branch: str = Field(..., max_length=100)
    email: EmailStr
    phone: str = Field(..., max_length=30)
    owner_email: Optional[EmailStr] = Field(None, alias="ownerEmail")
    website: Optional[str] = None
    bin_number: Optional[str] = Field(None, alias="binNumber")
    tin_number: Optional[str] = Field(None, alias="tinNumber")
    logo: Optional[str] = None
    address: Optional[str] = None
    other_information: Optional[str] = Field(None, alias="otherInformation")

    check_required = field_validator("name", "branch", "phone")(_required)

    @field_validator("owner_email", mode="before")
    @classmethod
    def blank_owner_email(cls, v):
        return v or None


class CategoryEntry(WizardModel):
    category_name: str = Field("", alias="categoryName")
    serial: Optional[int] = Field(None, ge=0)


class CategoriesStep(WizardModel):
    categories: List[CategoryEntry] = []


class ProductEntry(WizardModel):
    product_name: str = Field("", alias="productName")
    category: str = ""
    price: Decimal = Field(Decimal("0"), ge=0)

    @field_validator("price", mode="before")
    @classmethod
    def blank_price(cls, v):
        return Decimal("0") if v in (None, "") else v


class ProductsStep(WizardModel):
    products: List[ProductEntry] = []


class TablesStep(WizardModel):
    count: int = Field(settings.WIZARD_DEFAULT_TABLE_COUNT, ge=0, le=500)


class RoleEntry(WizardModel):
    role_name: str = Field("", alias="roleName")

    @field_validator("role_name", mode="before")
    @classmethod
    def normalize_role_name(cls, v):
        """'Kitchen Staff ' -> 'kitchenstaff'"""
        return _WHITESPACE.sub("", str(v or "")).lower()


class RolesStep(WizardModel):
    roles: List[RoleEntry] = []


class UserEntry(WizardModel):
    name: str = Field(..., max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=1)
    role: str = "user"

    check_name = field_validator("name")(_required)

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, v):
        return _WHITESPACE.sub("", str(v or "")).lower()


class UsersStep(WizardModel):
    users: List[UserEntry] = []


STEP_FORMS = {
    WizardStep.COMPANY: CompanyStep,
    WizardStep.CATEGORIES: CategoriesStep,
    WizardStep.PRODUCTS: ProductsStep,
    WizardStep.TABLES: TablesStep,
    WizardStep.ROLES: RolesStep,
    WizardStep.USERS: UsersStep,
}


# Accumulated state
class TableEntry(WizardModel):
    table_name: str = Field(..., alias="tableName")


class WizardState(WizardModel):
    company: Optional[CompanyStep] = None
    categories: List[CategoryEntry] = []
    products: List[ProductEntry] = []
    tables: List[TableEntry] = []
    roles: List[RoleEntry] = []
    users: List[UserEntry] = []

    def to_payload(self) -> Dict[str, Any]:
        """Body of the single setup-wizard submission."""
        return {
            "company": self.company.model_dump(by_alias=True, exclude_none=True, mode="json") if self.company else {},
            "categories": [
                {"categoryName": c.category_name, "serial": c.serial} for c in self.categories
            ],
            "products": [
                {"productName": p.product_name, "category": p.category, "price": float(p.price)}
                for p in self.products
            ],
            "tables": [{"tableName": t.table_name} for t in self.tables],
            "roles": [{"roleName": r.role_name} for r in self.roles],
            "users": [u.model_dump(mode="json") for u in self.users],
        }


# API models
class StepSubmission(BaseModel):
    step: WizardStep
    data: Dict[str, Any] = {}


class WizardReview(BaseModel):
    company_name: str
    branch: str
    categories: int
    products: int
    tables: int
    roles: int
    users: int


class WizardSessionResponse(BaseModel):
    session_id: str
    step: WizardStep
    step_index: int
    total_steps: int
    state: Dict[str, Any]
    updated_at: datetime


class WizardSubmitResponse(BaseModel):
    success: bool
    message: str
    session: WizardSessionResponse
