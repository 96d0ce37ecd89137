"""
测试配置文件 - pytest fixtures和共用配置
"""

import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from app.core.database import Base
from app.models.database import CourseDB, ReviewDB, DiscountCodeDB
from app.services.rating_aggregator import RatingAggregator


@pytest_asyncio.fixture
async def test_db_engine(tmp_path):
    """测试数据库引擎 - 使用临时SQLite文件，多个会话可以并发访问"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
        poolclass=NullPool,
        connect_args={"timeout": 30}
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(test_db_engine):
    """测试会话工厂"""
    return async_sessionmaker(
        test_db_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncSession:
    """测试数据库会话"""
    async with session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@pytest.fixture
def session_factory(session_maker):
    """独立事务的会话工厂，供评分聚合器使用"""

    @asynccontextmanager
    async def factory():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return factory


@pytest.fixture
def mock_cache():
    """模拟缓存"""
    cache = AsyncMock()
    cache.get = AsyncMock(return_value=None)
    cache.set = AsyncMock()
    cache.delete = AsyncMock()
    cache.delete_pattern = AsyncMock()
    return cache


@pytest.fixture
def aggregator(session_factory, mock_cache):
    """使用测试数据库的评分聚合器"""
    return RatingAggregator(session_factory=session_factory, cache=mock_cache)


@pytest.fixture
def make_course(session_maker):
    """向测试库插入一门课程"""

    async def _make(price="100", discount="0", title=None, **kwargs):
        title = title or f"Course {uuid.uuid4().hex[:8]}"
        course = CourseDB(
            course_id=kwargs.pop("course_id", uuid.uuid4().hex),
            title=title,
            slug=kwargs.pop("slug", title.lower().replace(" ", "-")),
            description="A course",
            instructor_id=kwargs.pop("instructor_id", "instructor_1"),
            price=Decimal(price),
            discount=Decimal(discount),
            ratings_quantity=0,
            **kwargs
        )
        async with session_maker() as session:
            session.add(course)
            await session.commit()
        return course

    return _make


@pytest.fixture
def make_review(session_maker):
    """向测试库插入一条评论或回复"""

    async def _make(course_id, user_id, rating=None, parent_review_id=None, text="Nice course"):
        review = ReviewDB(
            review_id=uuid.uuid4().hex,
            course_id=course_id,
            user_id=user_id,
            review=text,
            rating=rating,
            parent_review_id=parent_review_id
        )
        async with session_maker() as session:
            session.add(review)
            await session.commit()
        return review

    return _make


@pytest.fixture
def make_discount_code(session_maker):
    """向测试库插入一个折扣码"""

    async def _make(course_id, code="SUMMER20", **kwargs):
        values = {
            "discount_code_id": uuid.uuid4().hex,
            "code": code,
            "discount_percentage": Decimal("20"),
            "course_id": course_id,
            "max_usage": 10,
            "used_count": 0,
            "created_by": "admin_1",
            "expires_at": datetime.now(timezone.utc) + timedelta(days=30),
            "min_purchase_amount": Decimal("0"),
            "status": "active",
        }
        values.update(kwargs)
        discount_code = DiscountCodeDB(**values)
        async with session_maker() as session:
            session.add(discount_code)
            await session.commit()
        return discount_code

    return _make
