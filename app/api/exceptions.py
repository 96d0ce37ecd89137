"""
业务异常定义与全局异常处理器
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class BusinessException(Exception):
    """业务异常基类"""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(BusinessException):
    """资源不存在"""
    status_code = status.HTTP_404_NOT_FOUND


class DuplicateError(BusinessException):
    """资源重复"""
    status_code = status.HTTP_400_BAD_REQUEST


class ValidationError(BusinessException):
    """参数校验失败"""
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(BusinessException):
    """未登录或令牌无效"""
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDeniedError(BusinessException):
    """无权限"""
    status_code = status.HTTP_403_FORBIDDEN


class InvalidOrExpiredCodeError(BusinessException):
    """折扣码不存在、未激活、已过期或不适用于该课程"""


class UsageLimitReachedError(BusinessException):
    """折扣码已达到最大使用次数"""


class AlreadyUsedError(BusinessException):
    """折扣码已被使用"""


class MinimumPurchaseNotMetError(BusinessException):
    """未达到最低消费金额"""


def _envelope(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "status": "fail" if status_code < 500 else "error",
            "message": message,
        },
    )


async def business_exception_handler(request: Request, exc: BusinessException):
    """业务异常处理"""
    return _envelope(exc.status_code, exc.message)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """请求参数校验异常处理"""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(loc) for loc in first.get("loc", ()) if loc != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = "Invalid input data."
    return _envelope(status.HTTP_400_BAD_REQUEST, message)


async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """数据库异常处理"""
    logger.error(f"数据库异常 {request.method} {request.url.path}: {exc}")
    return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "Something went wrong!")


async def general_exception_handler(request: Request, exc: Exception):
    """未捕获异常处理"""
    logger.exception(f"未处理的异常 {request.method} {request.url.path}")
    return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "Something went wrong!")
