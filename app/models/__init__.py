"""
数据模型包初始化文件
"""

from .course import (
    Course,
    CourseCreate,
    CourseUpdate,
    CourseResponse,
    CourseDetail,
    CourseStatus,
    DifficultyLevel,
    calculate_final_price
)
from .review import (
    Review,
    ReviewCreate,
    ReplyCreate,
    ReviewUpdate,
    ReviewThread,
    RatingStats
)
from .discount_code import (
    DiscountCode,
    DiscountCodeCreate,
    DiscountCodeUpdate,
    DiscountCodeStatus,
    ApplyDiscountRequest,
    ApplyDiscountResult,
    GeneralDiscountRequest,
    normalize_code
)

__all__ = [
    "Course",
    "CourseCreate",
    "CourseUpdate",
    "CourseResponse",
    "CourseDetail",
    "CourseStatus",
    "DifficultyLevel",
    "calculate_final_price",
    "Review",
    "ReviewCreate",
    "ReplyCreate",
    "ReviewUpdate",
    "ReviewThread",
    "RatingStats",
    "DiscountCode",
    "DiscountCodeCreate",
    "DiscountCodeUpdate",
    "DiscountCodeStatus",
    "ApplyDiscountRequest",
    "ApplyDiscountResult",
    "GeneralDiscountRequest",
    "normalize_code"
]
