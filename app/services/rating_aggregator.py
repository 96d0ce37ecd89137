"""
课程评分聚合服务
顶级评论写入提交后，重新计算课程的平均评分与评分数量
"""

import logging
from typing import Any, AsyncContextManager, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import session_scope
from app.models.review import Review, RatingStats
from app.repositories.course_repository import CourseRepository
from app.repositories.review_repository import ReviewRepository
from app.services.common_cache import course_cache

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AsyncContextManager[AsyncSession]]


def affects_ratings(review: Review) -> bool:
    """只有带评分的顶级评论会影响课程评分，回复永远不参与"""
    return review.is_top_level and review.rating is not None


class RatingAggregator:
    """
    评分聚合器

    在独立会话中执行，不参与触发它的请求事务；并发写入时最后一次重算生效。
    """

    def __init__(self, session_factory: Optional[SessionFactory] = None, cache: Any = None):
        self.session_factory = session_factory or session_scope
        self.cache = cache or course_cache

    async def compute(self, review_repo: ReviewRepository, course_id: str) -> RatingStats:
        """只读计算，不写回"""
        return await review_repo.get_rating_stats(course_id)

    async def recompute(self, course_id: str) -> Optional[RatingStats]:
        """重新计算并写回课程评分，课程不存在时直接返回None"""
        async with self.session_factory() as session:
            course_repo = CourseRepository(session)
            review_repo = ReviewRepository(session)

            db_course = await course_repo.get_by_course_id(course_id)
            if not db_course:
                logger.info(f"课程 {course_id} 不存在，跳过评分聚合")
                return None

            stats = await self.compute(review_repo, course_id)
            await course_repo.update_ratings(course_id, stats)
            slug = db_course.slug

        await self.cache.delete(f"detail:{slug}")
        logger.debug(f"课程 {course_id} 评分已更新: average={stats.average} quantity={stats.quantity}")
        return stats

    async def recompute_safely(self, course_id: str) -> Optional[RatingStats]:
        """重算失败只记录日志，不影响已提交的评论写入"""
        try:
            return await self.recompute(course_id)
        except Exception:
            logger.exception(f"课程 {course_id} 评分聚合失败")
            return None


# 全局评分聚合器实例
rating_aggregator = RatingAggregator()
