"""
路由依赖：当前用户、角色校验与服务实例
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.exceptions import AuthenticationError, PermissionDeniedError
from app.core.database import get_db_session
from app.core.security import CurrentUser, UserRole, InvalidTokenError, decode_access_token
from app.repositories.course_repository import CourseRepository
from app.repositories.discount_code_repository import DiscountCodeRepository
from app.repositories.review_repository import ReviewRepository
from app.services.course_service import CourseService
from app.services.discount_code_service import DiscountCodeService
from app.services.review_service import ReviewService

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> CurrentUser:
    """解析Bearer令牌得到当前用户"""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("You are not logged in! Please log in to get access.")
    try:
        return decode_access_token(credentials.credentials)
    except InvalidTokenError as e:
        raise AuthenticationError(str(e))


def require_roles(*roles: UserRole):
    """限制只有指定角色可以访问"""

    async def checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in roles:
            raise PermissionDeniedError("You do not have permission to perform this action")
        return user

    return checker


def get_course_service(db: AsyncSession = Depends(get_db_session)) -> CourseService:
    return CourseService(CourseRepository(db), ReviewRepository(db))


def get_review_service(db: AsyncSession = Depends(get_db_session)) -> ReviewService:
    return ReviewService(ReviewRepository(db), CourseRepository(db))


def get_discount_code_service(db: AsyncSession = Depends(get_db_session)) -> DiscountCodeService:
    return DiscountCodeService(DiscountCodeRepository(db), CourseRepository(db))
