"""
数据库模型包初始化文件
"""

from .course_db import CourseDB
from .review_db import ReviewDB
from .discount_code_db import DiscountCodeDB

__all__ = [
    "CourseDB",
    "ReviewDB",
    "DiscountCodeDB"
]
