"""
API测试共用配置 - 使用测试数据库替换请求会话
"""

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from app.core.database import get_db_session
from app.core.security import UserRole, create_access_token
from app.main import app
from app.services.rating_aggregator import rating_aggregator


@pytest_asyncio.fixture
async def client(session_maker, session_factory, mock_cache, monkeypatch):
    """使用测试数据库的HTTP客户端"""

    async def override_get_db_session():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    monkeypatch.setattr(rating_aggregator, "session_factory", session_factory)
    monkeypatch.setattr(rating_aggregator, "cache", mock_cache)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """生成带Bearer令牌的请求头"""

    def _headers(user_id: str = "user_1", role: UserRole = UserRole.USER) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user_id, role)}"}

    return _headers


@pytest.fixture
def user_headers(auth_headers):
    return auth_headers("user_1")


@pytest.fixture
def admin_headers(auth_headers):
    return auth_headers("admin_1", UserRole.ADMIN)


class DictCache:
    """内存字典缓存，接口与SimpleCache一致"""

    def __init__(self):
        self.store = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ttl=None):
        self.store[key] = value
        return True

    async def delete(self, key):
        return self.store.pop(key, None) is not None

    async def delete_pattern(self, pattern):
        prefix = pattern.rstrip("*")
        keys = [key for key in self.store if key.startswith(prefix)]
        for key in keys:
            del self.store[key]
        return len(keys)


@pytest.fixture
def dict_cache():
    return DictCache()
