"""
评论数据库操作层
"""

from typing import List, Optional, Dict, Any

from sqlalchemy import select, delete, and_, or_, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.review import Review, RatingStats
from app.models.database.review_db import ReviewDB


class ReviewRepository:
    """评论数据库操作类"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def commit(self) -> None:
        """提交当前事务"""
        await self.db.commit()

    async def rollback(self) -> None:
        """回滚当前事务"""
        await self.db.rollback()

    async def get_by_review_id(self, review_id: str) -> Optional[ReviewDB]:
        """根据评论ID获取评论"""
        result = await self.db.execute(
            select(ReviewDB).where(ReviewDB.review_id == review_id)
        )
        return result.scalar_one_or_none()

    async def get_top_level_for_user(self, course_id: str, user_id: str) -> Optional[ReviewDB]:
        """获取用户对课程的顶级评论"""
        result = await self.db.execute(
            select(ReviewDB).where(
                and_(
                    ReviewDB.course_id == course_id,
                    ReviewDB.user_id == user_id,
                    ReviewDB.parent_review_id.is_(None)
                )
            )
        )
        return result.scalar_one_or_none()

    async def list_for_course(self, course_id: str) -> List[ReviewDB]:
        """获取课程的全部评论（含回复），按时间正序"""
        result = await self.db.execute(
            select(ReviewDB)
            .where(ReviewDB.course_id == course_id)
            .order_by(ReviewDB.created_at, ReviewDB.review_id)
        )
        return result.scalars().all()

    async def list_reviews(self, limit: int = 100, offset: int = 0) -> List[ReviewDB]:
        """获取全部评论"""
        result = await self.db.execute(
            select(ReviewDB)
            .order_by(ReviewDB.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return result.scalars().all()

    async def create(self, values: Dict[str, Any]) -> ReviewDB:
        """创建评论或回复"""
        db_review = ReviewDB(**values)
        self.db.add(db_review)
        await self.db.flush()
        await self.db.refresh(db_review)
        return db_review

    async def update(self, review_id: str, values: Dict[str, Any]) -> Optional[ReviewDB]:
        """更新评论"""
        db_review = await self.get_by_review_id(review_id)
        if not db_review:
            return None

        for field, value in values.items():
            setattr(db_review, field, value)

        await self.db.flush()
        await self.db.refresh(db_review)
        return db_review

    async def delete(self, review_id: str) -> int:
        """删除评论及其回复，返回删除的行数"""
        result = await self.db.execute(
            delete(ReviewDB).where(
                or_(
                    ReviewDB.review_id == review_id,
                    ReviewDB.parent_review_id == review_id
                )
            ).execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def delete_for_course(self, course_id: str) -> int:
        """删除课程下的全部评论"""
        result = await self.db.execute(
            delete(ReviewDB)
            .where(ReviewDB.course_id == course_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def get_rating_stats(self, course_id: str) -> RatingStats:
        """统计课程顶级评论的评分数量与均值"""
        result = await self.db.execute(
            select(
                func.count(ReviewDB.rating).label("quantity"),
                func.avg(ReviewDB.rating).label("average")
            ).where(
                and_(
                    ReviewDB.course_id == course_id,
                    ReviewDB.parent_review_id.is_(None)
                )
            )
        )
        row = result.one()
        return RatingStats.from_aggregate(row.quantity, row.average)

    def to_model(self, db_review: ReviewDB) -> Review:
        """转换为Pydantic模型"""
        return Review(
            review_id=db_review.review_id,
            course_id=db_review.course_id,
            user_id=db_review.user_id,
            review=db_review.review,
            rating=db_review.rating,
            parent_review_id=db_review.parent_review_id,
            created_at=db_review.created_at,
            updated_at=db_review.updated_at
        )
