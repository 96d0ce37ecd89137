"""
折扣码数据库模型
"""

import uuid

from sqlalchemy import Column, String, Integer, Numeric, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.sql import func
from app.core.database import Base


class DiscountCodeDB(Base):
    """折扣码数据库表"""

    __tablename__ = "discount_codes"

    discount_code_id = Column(String(50), primary_key=True, default=lambda: uuid.uuid4().hex, comment="折扣码ID")
    code = Column(String(50), nullable=False, unique=True, index=True, comment="折扣码(大写)")
    discount_percentage = Column(Numeric(5, 2), nullable=False, comment="折扣百分比")
    course_id = Column(
        String(50),
        ForeignKey("courses.course_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="适用课程ID"
    )

    # 使用限制
    max_usage = Column(Integer, nullable=False, comment="最大使用次数")
    used_count = Column(Integer, nullable=False, default=0, comment="已使用次数")
    min_purchase_amount = Column(Numeric(10, 2), nullable=False, default=0, comment="最低消费金额")

    created_by = Column(String(50), nullable=False, comment="创建者用户ID")
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True, comment="过期时间")
    status = Column(String(20), nullable=False, default="active", index=True, comment="状态")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), comment="创建时间")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), comment="更新时间")

    __table_args__ = (
        CheckConstraint("used_count <= max_usage", name="ck_discount_codes_usage_cap"),
        {'comment': '折扣码表'}
    )
