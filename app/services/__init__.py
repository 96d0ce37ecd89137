"""
服务包初始化文件
"""

from .common_cache import SimpleCache, course_cache
from .rating_aggregator import RatingAggregator, rating_aggregator
from .course_service import CourseService
from .review_service import ReviewService
from .discount_code_service import DiscountCodeService

__all__ = [
    "SimpleCache",
    "course_cache",
    "RatingAggregator",
    "rating_aggregator",
    "CourseService",
    "ReviewService",
    "DiscountCodeService"
]
