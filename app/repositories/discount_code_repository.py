"""
折扣码数据库操作层
"""

from typing import List, Optional, Dict, Any
from datetime import datetime, timezone

from sqlalchemy import select, update, delete, and_, desc, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.discount_code import DiscountCode, DiscountCodeStatus
from app.models.database.discount_code_db import DiscountCodeDB


class DiscountCodeRepository:
    """折扣码数据库操作类"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def commit(self) -> None:
        """提交当前事务"""
        await self.db.commit()

    async def rollback(self) -> None:
        """回滚当前事务"""
        await self.db.rollback()

    async def get_by_id(self, discount_code_id: str, refresh: bool = False) -> Optional[DiscountCodeDB]:
        """根据ID获取折扣码，refresh=True时忽略会话中的旧数据"""
        query = select(DiscountCodeDB).where(DiscountCodeDB.discount_code_id == discount_code_id)
        if refresh:
            query = query.execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_code(self, code: str) -> Optional[DiscountCodeDB]:
        """根据折扣码获取"""
        result = await self.db.execute(
            select(DiscountCodeDB).where(DiscountCodeDB.code == code)
        )
        return result.scalar_one_or_none()

    async def find_redeemable(
        self,
        code: str,
        course_id: str,
        current_time: Optional[datetime] = None
    ) -> Optional[DiscountCodeDB]:
        """查找激活、未过期且适用于该课程的折扣码"""
        if current_time is None:
            current_time = datetime.now(timezone.utc)

        result = await self.db.execute(
            select(DiscountCodeDB).where(
                and_(
                    DiscountCodeDB.code == code,
                    DiscountCodeDB.status == DiscountCodeStatus.ACTIVE.value,
                    DiscountCodeDB.expires_at > current_time,
                    DiscountCodeDB.course_id == course_id
                )
            )
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> List[DiscountCodeDB]:
        """获取全部折扣码"""
        result = await self.db.execute(
            select(DiscountCodeDB).order_by(desc(DiscountCodeDB.created_at))
        )
        return result.scalars().all()

    async def create(self, values: Dict[str, Any]) -> DiscountCodeDB:
        """创建折扣码"""
        db_code = DiscountCodeDB(**values)
        self.db.add(db_code)
        await self.db.flush()
        await self.db.refresh(db_code)
        return db_code

    async def update(self, discount_code_id: str, values: Dict[str, Any]) -> Optional[DiscountCodeDB]:
        """更新折扣码"""
        db_code = await self.get_by_id(discount_code_id)
        if not db_code:
            return None

        for field, value in values.items():
            setattr(db_code, field, value)

        await self.db.flush()
        await self.db.refresh(db_code)
        return db_code

    async def delete(self, discount_code_id: str) -> bool:
        """删除折扣码"""
        result = await self.db.execute(
            delete(DiscountCodeDB).where(DiscountCodeDB.discount_code_id == discount_code_id)
        )
        return result.rowcount > 0

    async def increment_usage(self, discount_code_id: str, expected_used_count: int) -> bool:
        """
        条件自增使用次数

        只有当 used_count 仍等于调用方读到的值且未达到 max_usage 时才 +1，
        检查和写入在同一条 UPDATE 中完成。返回是否成功。
        """
        result = await self.db.execute(
            update(DiscountCodeDB)
            .where(
                and_(
                    DiscountCodeDB.discount_code_id == discount_code_id,
                    DiscountCodeDB.used_count == expected_used_count,
                    DiscountCodeDB.used_count < DiscountCodeDB.max_usage
                )
            )
            .values(
                used_count=DiscountCodeDB.used_count + 1,
                updated_at=func.now()
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def to_model(self, db_code: DiscountCodeDB) -> DiscountCode:
        """转换为Pydantic模型"""
        return DiscountCode(
            discount_code_id=db_code.discount_code_id,
            code=db_code.code,
            discount_percentage=db_code.discount_percentage,
            course_id=db_code.course_id,
            max_usage=db_code.max_usage,
            used_count=db_code.used_count or 0,
            created_by=db_code.created_by,
            expires_at=db_code.expires_at,
            min_purchase_amount=db_code.min_purchase_amount or 0,
            status=db_code.status,
            created_at=db_code.created_at,
            updated_at=db_code.updated_at
        )
