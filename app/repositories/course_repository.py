"""
课程数据库操作层
"""

from typing import List, Optional, Dict, Any
from decimal import Decimal

from sqlalchemy import select, update, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.course import Course
from app.models.review import RatingStats
from app.models.database.course_db import CourseDB


class CourseRepository:
    """课程数据库操作类"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def commit(self) -> None:
        """提交当前事务"""
        await self.db.commit()

    async def rollback(self) -> None:
        """回滚当前事务"""
        await self.db.rollback()

    async def get_by_course_id(self, course_id: str) -> Optional[CourseDB]:
        """根据课程ID获取课程"""
        result = await self.db.execute(
            select(CourseDB).where(CourseDB.course_id == course_id)
        )
        return result.scalar_one_or_none()

    async def get_by_slug(self, slug: str) -> Optional[CourseDB]:
        """根据slug获取课程"""
        result = await self.db.execute(
            select(CourseDB).where(CourseDB.slug == slug)
        )
        return result.scalar_one_or_none()

    async def slug_exists(self, slug: str, exclude_course_id: Optional[str] = None) -> bool:
        """检查slug是否已被占用"""
        query = select(func.count(CourseDB.course_id)).where(CourseDB.slug == slug)
        if exclude_course_id:
            query = query.where(CourseDB.course_id != exclude_course_id)
        result = await self.db.execute(query)
        return (result.scalar() or 0) > 0

    async def list_courses(self, limit: int = 20, offset: int = 0) -> List[CourseDB]:
        """获取课程列表"""
        query = select(CourseDB).order_by(
            CourseDB.created_at.desc()
        ).limit(limit).offset(offset)

        result = await self.db.execute(query)
        return result.scalars().all()

    async def create(self, values: Dict[str, Any]) -> CourseDB:
        """创建课程"""
        db_course = CourseDB(**values)
        self.db.add(db_course)
        await self.db.flush()
        await self.db.refresh(db_course)
        return db_course

    async def update(self, course_id: str, values: Dict[str, Any]) -> Optional[CourseDB]:
        """更新课程字段"""
        db_course = await self.get_by_course_id(course_id)
        if not db_course:
            return None

        for field, value in values.items():
            setattr(db_course, field, value)

        await self.db.flush()
        await self.db.refresh(db_course)
        return db_course

    async def delete(self, course_id: str) -> bool:
        """删除课程（评论需由调用方先行删除）"""
        result = await self.db.execute(
            delete(CourseDB).where(CourseDB.course_id == course_id)
        )
        return result.rowcount > 0

    async def update_ratings(self, course_id: str, stats: RatingStats) -> bool:
        """一次性写回评分均值和数量"""
        result = await self.db.execute(
            update(CourseDB)
            .where(CourseDB.course_id == course_id)
            .values(
                ratings_average=stats.average,
                ratings_quantity=stats.quantity,
                updated_at=func.now()
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def set_discount_for_all(self, discount: Decimal) -> int:
        """批量设置所有课程的平台折扣，返回实际修改的课程数"""
        result = await self.db.execute(
            update(CourseDB)
            .where(CourseDB.discount != discount)
            .values(discount=discount, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def to_model(self, db_course: CourseDB) -> Course:
        """转换为Pydantic模型"""
        return Course(
            course_id=db_course.course_id,
            title=db_course.title,
            slug=db_course.slug,
            description=db_course.description,
            short_description=db_course.short_description,
            category_id=db_course.category_id,
            instructor_id=db_course.instructor_id,
            price=db_course.price,
            discount=db_course.discount,
            duration=db_course.duration or 0,
            difficulty=db_course.difficulty,
            tags=db_course.tags or [],
            status=db_course.status,
            is_published=bool(db_course.is_published),
            ratings_average=db_course.ratings_average,
            ratings_quantity=db_course.ratings_quantity or 0,
            created_at=db_course.created_at,
            updated_at=db_course.updated_at
        )
