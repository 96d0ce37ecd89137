"""
仓库包初始化文件 - 数据库访问层
"""

from .course_repository import CourseRepository
from .review_repository import ReviewRepository
from .discount_code_repository import DiscountCodeRepository

__all__ = [
    "CourseRepository",
    "ReviewRepository",
    "DiscountCodeRepository"
]
