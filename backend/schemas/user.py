from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional, List, Dict, Any
from enum import Enum


class UserStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class UserBase(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    role: str = Field(..., min_length=1, max_length=50)
    branch: Optional[str] = Field(None, max_length=100)
    status: UserStatus = UserStatus.ACTIVE
    photo: Optional[str] = None
    counter: Optional[str] = Field(None, max_length=20)


class UserCreate(UserBase):
    password: str = Field(..., min_length=6)


class UserUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    role: Optional[str] = Field(None, min_length=1, max_length=50)
    branch: Optional[str] = Field(None, max_length=100)
    status: Optional[UserStatus] = None
    photo: Optional[str] = None
    counter: Optional[str] = Field(None, max_length=20)
    password: Optional[str] = Field(None, min_length=6)


class Pagination(BaseModel):
    current_page: int = 1
    total_pages: int = 1
    total_documents: int = 0


class UserPage(BaseModel):
    data: List[Dict[str, Any]]
    pagination: Pagination


class UserList(BaseModel):
    data: List[Dict[str, Any]]
    total: int


class AssignableRoles(BaseModel):
    role: str
    roles: List[str]


class PermissionsResponse(BaseModel):
    role: str
    bypass: bool
    permissions: Dict[str, Dict[str, bool]]
