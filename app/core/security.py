"""
JWT令牌工具
令牌由外部认证服务签发，这里只负责解析出用户身份和角色
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

import jwt
from pydantic import BaseModel

from app.core.config import settings


class UserRole(str, Enum):
    """用户角色枚举"""
    USER = "user"
    INSTRUCTOR = "instructor"
    ADMIN = "admin"


class CurrentUser(BaseModel):
    """当前请求的用户身份"""
    user_id: str
    role: UserRole = UserRole.USER


class InvalidTokenError(Exception):
    """令牌无效或已过期"""


def create_access_token(
    user_id: str,
    role: UserRole = UserRole.USER,
    expires_minutes: Optional[int] = None
) -> str:
    """签发访问令牌（测试和运维脚本使用）"""
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=expires_minutes or settings.access_token_expire_minutes
    )
    payload = {"user_id": user_id, "role": UserRole(role).value, "exp": expire}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> CurrentUser:
    """解析访问令牌"""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise InvalidTokenError("Your token has expired! Please log in again.")
    except jwt.InvalidTokenError:
        raise InvalidTokenError("Invalid token. Please log in again!")

    user_id = payload.get("user_id")
    if not user_id:
        raise InvalidTokenError("Invalid token. Please log in again!")

    try:
        role = UserRole(payload.get("role", UserRole.USER.value))
    except ValueError:
        raise InvalidTokenError("Invalid token. Please log in again!")

    return CurrentUser(user_id=str(user_id), role=role)
