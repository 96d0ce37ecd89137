from fastapi import APIRouter
from fastapi.responses import JSONResponse
import logging

from app.core.config import settings
from app.core.redis import redis_manager
from app.core.database import database_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["健康检查"])


@router.get("")
async def health_check():
    """基础健康检查接口"""
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment
    }


@router.get("/database")
async def database_health():
    """数据库与缓存连接健康检查"""
    health_status = {
        "postgresql": False,
        "redis": False,
        "overall": False,
        "details": {}
    }

    pg_status = await database_service.health_check()
    health_status["postgresql"] = pg_status["status"] == "healthy"
    health_status["details"]["postgresql"] = pg_status["message"]

    health_status["redis"] = await redis_manager.ping()
    health_status["details"]["redis"] = "连接正常" if health_status["redis"] else "连接不可用"

    # 缓存不可用时服务仍可降级运行，只有数据库决定整体状态
    health_status["overall"] = health_status["postgresql"]

    if not health_status["overall"]:
        logger.warning("数据库连接检查失败", extra={"health": health_status})
        return JSONResponse(status_code=503, content=health_status)

    logger.info("数据库连接检查通过")
    return health_status
