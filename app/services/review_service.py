"""
评论业务服务层
评论写入提交后触发课程评分聚合
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from app.api.exceptions import NotFoundError, DuplicateError, ValidationError, PermissionDeniedError
from app.core.security import CurrentUser, UserRole
from app.models.review import Review, ReviewCreate, ReplyCreate, ReviewUpdate, ReviewThread
from app.repositories.course_repository import CourseRepository
from app.repositories.review_repository import ReviewRepository
from app.services.common_cache import course_cache
from app.services.rating_aggregator import RatingAggregator, affects_ratings, rating_aggregator

logger = logging.getLogger(__name__)


class ReviewService:
    """评论业务服务"""

    def __init__(
        self,
        review_repo: ReviewRepository,
        course_repo: CourseRepository,
        aggregator: Optional[RatingAggregator] = None
    ):
        self.review_repo = review_repo
        self.course_repo = course_repo
        self.aggregator = aggregator or rating_aggregator
        self.cache = course_cache

    async def create_review(self, slug: str, user_id: str, data: ReviewCreate) -> Review:
        """创建顶级评论"""
        db_course = await self.course_repo.get_by_slug(slug)
        if not db_course:
            raise NotFoundError("Course not found!")

        existing = await self.review_repo.get_top_level_for_user(db_course.course_id, user_id)
        if existing:
            raise DuplicateError("You have already reviewed this course!")

        try:
            db_review = await self.review_repo.create({
                "course_id": db_course.course_id,
                "user_id": user_id,
                "review": data.review,
                "rating": data.rating,
                "parent_review_id": None,
            })
            review = self.review_repo.to_model(db_review)
            await self.review_repo.commit()
        except IntegrityError:
            # 并发请求撞上了部分唯一索引
            await self.review_repo.rollback()
            raise DuplicateError("You have already reviewed this course!")

        await self._clear_course_cache(review.course_id)
        if affects_ratings(review):
            await self.aggregator.recompute_safely(review.course_id)

        return review

    async def create_reply(
        self,
        course_id: str,
        review_id: str,
        user_id: str,
        data: ReplyCreate
    ) -> Review:
        """回复一条评论，回复不带评分，不触发评分聚合"""
        parent = await self.review_repo.get_by_review_id(review_id)
        if not parent or parent.course_id != course_id:
            raise NotFoundError("Review not found")

        db_reply = await self.review_repo.create({
            "course_id": parent.course_id,
            "user_id": user_id,
            "review": data.review,
            "rating": None,
            "parent_review_id": parent.review_id,
        })
        reply = self.review_repo.to_model(db_reply)
        await self.review_repo.commit()
        await self._clear_course_cache(reply.course_id)
        return reply

    async def get_reviews_for_course(self, slug: str) -> List[ReviewThread]:
        """获取课程评论树"""
        db_course = await self.course_repo.get_by_slug(slug)
        if not db_course:
            raise NotFoundError("Course not found!")

        db_reviews = await self.review_repo.list_for_course(db_course.course_id)
        if not db_reviews:
            raise NotFoundError("No reviews found for this course!")

        return ReviewThread.build(self.review_repo.to_model(r) for r in db_reviews)

    async def get_review(self, review_id: str) -> Review:
        db_review = await self.review_repo.get_by_review_id(review_id)
        if not db_review:
            raise NotFoundError("No review found with that ID")
        return self.review_repo.to_model(db_review)

    async def list_reviews(self, limit: int = 100, offset: int = 0) -> List[Review]:
        db_reviews = await self.review_repo.list_reviews(limit=limit, offset=offset)
        return [self.review_repo.to_model(r) for r in db_reviews]

    async def update_review(self, review_id: str, data: ReviewUpdate, user: CurrentUser) -> Review:
        """更新评论，只有作者或管理员可以修改，顶级评论改分后重算课程评分"""
        db_review = await self.review_repo.get_by_review_id(review_id)
        if not db_review:
            raise NotFoundError("No review found with that ID")
        self._check_owner(db_review.user_id, user)

        values = data.model_dump(exclude_unset=True, exclude_none=True)
        if db_review.parent_review_id is not None and "rating" in values:
            raise ValidationError("Replies can not have a rating")

        if not values:
            return self.review_repo.to_model(db_review)

        db_review = await self.review_repo.update(review_id, values)
        review = self.review_repo.to_model(db_review)
        await self.review_repo.commit()
        await self._clear_course_cache(review.course_id)

        if "rating" in values and affects_ratings(review):
            await self.aggregator.recompute_safely(review.course_id)

        return review

    async def delete_review(self, review_id: str, user: CurrentUser) -> None:
        """删除评论（连同回复），只有作者或管理员可以删除，顶级评论删除后重算课程评分"""
        db_review = await self.review_repo.get_by_review_id(review_id)
        if not db_review:
            raise NotFoundError("No review found with that ID")
        self._check_owner(db_review.user_id, user)

        review = self.review_repo.to_model(db_review)
        await self.review_repo.delete(review_id)
        await self.review_repo.commit()
        await self._clear_course_cache(review.course_id)

        if review.is_top_level:
            await self.aggregator.recompute_safely(review.course_id)

    @staticmethod
    def _check_owner(owner_id: str, user: CurrentUser) -> None:
        if user.role != UserRole.ADMIN and owner_id != user.user_id:
            raise PermissionDeniedError("You do not have permission to perform this action")

    async def _clear_course_cache(self, course_id: str) -> None:
        """评论写入后清除课程详情缓存（详情中包含评论树）"""
        db_course = await self.course_repo.get_by_course_id(course_id)
        if db_course:
            await self.cache.delete(f"detail:{db_course.slug}")
