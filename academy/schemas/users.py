"""身份相关的请求/响应模型。"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from academy.models.enums import Role
from academy.schemas.base import CamelModel


class UserPublic(CamelModel):
    """不含密码摘要的用户投影，所有读接口都返回它。"""

    id: int
    username: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: Role
    created_at: datetime
    last_login_at: Optional[datetime] = None


class RegisterRequest(CamelModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    role: Role
    email: Optional[str] = None
    full_name: Optional[str] = None


class LoginRequest(CamelModel):
    identifier: str = Field(min_length=1)
    password: str = Field(min_length=1)


class AuthResponse(CamelModel):
    token: str
    user: UserPublic


class ProfileUpdate(CamelModel):
    username: Optional[str] = None
    email: Optional[str] = None
    full_name: Optional[str] = None
    password: Optional[str] = None


class AdminUserUpdate(ProfileUpdate):
    role: Optional[Role] = None
