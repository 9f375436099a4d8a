from pydantic import Field
from typing import List, Literal, Optional
from datetime import datetime

from schemas.base import CamelModel

# Schema for user authentication credentials
class UserLogin(CamelModel):
    teacher_id: str = Field(min_length=1)
    password: str = Field(min_length=1)

# Schema for admin-created accounts; admins only appear through promotion
class UserCreate(CamelModel):
    teacher_id: str = Field(min_length=1, max_length=32)
    name: str = Field(min_length=3)
    phone: Optional[str] = Field(default=None, min_length=10)
    designation: Optional[str] = None
    password: str = Field(min_length=6)
    role: Literal["teacher", "hod"] = "teacher"

    class Config:
        str_strip_whitespace = True

# Output schema for user profile details, never carries the credential
class UserResponse(CamelModel):
    id: int
    teacher_id: str
    name: str
    phone: Optional[str] = None
    designation: Optional[str] = None
    role: str
    created_at: Optional[datetime] = None

# Fields shown to anonymous visitors
class PublicUserResponse(CamelModel):
    teacher_id: str
    name: str
    designation: Optional[str] = None
    role: str

# Profile fields a user may change on their own record
class UserUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=3)
    phone: Optional[str] = Field(default=None, min_length=10)
    designation: Optional[str] = Field(default=None, min_length=3)

    class Config:
        str_strip_whitespace = True

class PasswordChange(CamelModel):
    old_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6)

# Schema for administrative role updates
class RoleUpdate(CamelModel):
    role: str

# Returned by /auth/login
class LoginResponse(CamelModel):
    user: UserResponse
    token: str
    token_type: str = "bearer"

class UsersPage(CamelModel):
    items: List[UserResponse]
    total: int
    page: int
    page_size: int
