"""
课程业务服务层
提供课程相关的业务逻辑处理
"""

import logging
import uuid
from typing import List, Optional

from slugify import slugify
from sqlalchemy.exc import IntegrityError

from app.api.exceptions import NotFoundError, DuplicateError
from app.core.config import settings
from app.models.course import Course, CourseCreate, CourseUpdate, CourseResponse, CourseDetail
from app.models.review import ReviewThread
from app.repositories.course_repository import CourseRepository
from app.repositories.review_repository import ReviewRepository
from app.services.common_cache import course_cache

logger = logging.getLogger(__name__)


def make_slug(title: str) -> str:
    """由标题生成slug，标题里没有可用字符时退回随机值"""
    slug = slugify(title, lowercase=True)
    return slug or uuid.uuid4().hex[:12]


class CourseService:
    """课程业务服务"""

    def __init__(self, course_repo: CourseRepository, review_repo: ReviewRepository):
        self.course_repo = course_repo
        self.review_repo = review_repo
        self.cache = course_cache
        self.cache_ttl = settings.course_cache_ttl

    async def create_course(self, data: CourseCreate, instructor_id: str) -> Course:
        """创建课程，讲师为当前用户"""
        slug = make_slug(data.title)
        if await self.course_repo.slug_exists(slug):
            raise DuplicateError("A course with this title already exists!")

        values = data.model_dump()
        values.update(slug=slug, instructor_id=instructor_id)
        if values.get("difficulty") is not None:
            values["difficulty"] = data.difficulty.value
        values["status"] = data.status.value

        try:
            db_course = await self.course_repo.create(values)
            course = self.course_repo.to_model(db_course)
            await self.course_repo.commit()
        except IntegrityError:
            await self.course_repo.rollback()
            raise DuplicateError("A course with this title already exists!")

        logger.info(f"课程已创建: {course.course_id} ({course.slug})")
        return course

    async def get_course(self, course_id: str) -> Course:
        db_course = await self.course_repo.get_by_course_id(course_id)
        if not db_course:
            raise NotFoundError("Course not found!")
        return self.course_repo.to_model(db_course)

    async def list_courses(self, limit: int = 20, offset: int = 0) -> List[Course]:
        db_courses = await self.course_repo.list_courses(limit=limit, offset=offset)
        return [self.course_repo.to_model(db_course) for db_course in db_courses]

    async def get_course_by_slug(self, slug: str, use_cache: bool = True) -> CourseDetail:
        """获取课程详情及评论树"""
        cache_key = f"detail:{slug}"

        if use_cache:
            cached_detail = await self.cache.get(cache_key)
            if cached_detail:
                return CourseDetail(**cached_detail)

        db_course = await self.course_repo.get_by_slug(slug)
        if not db_course:
            raise NotFoundError("Course not found!")

        course = self.course_repo.to_model(db_course)
        db_reviews = await self.review_repo.list_for_course(course.course_id)
        detail = CourseDetail(
            course=CourseResponse.from_course(course),
            reviews=ReviewThread.build(self.review_repo.to_model(r) for r in db_reviews)
        )

        if use_cache:
            await self.cache.set(cache_key, detail.model_dump(mode="json"), ttl=self.cache_ttl)

        return detail

    async def update_course(self, course_id: str, data: CourseUpdate) -> Course:
        """更新课程，标题变化时重新生成slug"""
        db_course = await self.course_repo.get_by_course_id(course_id)
        if not db_course:
            raise NotFoundError("Course not found!")
        old_slug = db_course.slug

        values = data.model_dump(exclude_unset=True)
        for field in ("difficulty", "status"):
            if values.get(field) is not None:
                values[field] = values[field].value

        if values.get("title"):
            values["title"] = values["title"].strip()
            new_slug = make_slug(values["title"])
            if new_slug != old_slug:
                if await self.course_repo.slug_exists(new_slug, exclude_course_id=course_id):
                    raise DuplicateError("A course with this title already exists!")
                values["slug"] = new_slug

        db_course = await self.course_repo.update(course_id, values)
        course = self.course_repo.to_model(db_course)
        await self.course_repo.commit()

        await self._clear_course_caches(old_slug, course.slug)
        return course

    async def delete_course(self, course_id: str) -> None:
        """删除课程，先显式删除课程下的全部评论"""
        db_course = await self.course_repo.get_by_course_id(course_id)
        if not db_course:
            raise NotFoundError("Course not found!")
        slug = db_course.slug

        deleted_reviews = await self.review_repo.delete_for_course(course_id)
        await self.course_repo.delete(course_id)
        await self.course_repo.commit()

        logger.info(f"课程已删除: {course_id}，同时删除评论 {deleted_reviews} 条")
        await self._clear_course_caches(slug)

    async def _clear_course_caches(self, *slugs: Optional[str]):
        """清除课程详情缓存"""
        for slug in {s for s in slugs if s}:
            await self.cache.delete(f"detail:{slug}")
