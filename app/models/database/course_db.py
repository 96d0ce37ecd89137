"""
课程数据库模型
"""

import uuid

from sqlalchemy import Column, String, Integer, Numeric, Float, Text, Boolean, DateTime, JSON
from sqlalchemy.sql import func
from app.core.database import Base


class CourseDB(Base):
    """课程数据库表"""

    __tablename__ = "courses"

    # 主键和基本信息
    course_id = Column(String(50), primary_key=True, default=lambda: uuid.uuid4().hex, comment="课程ID")
    title = Column(String(200), nullable=False, comment="课程标题")
    slug = Column(String(220), nullable=False, unique=True, index=True, comment="课程slug")
    description = Column(Text, nullable=False, comment="课程描述")
    short_description = Column(Text, comment="简短描述")
    category_id = Column(String(50), index=True, comment="分类ID")
    instructor_id = Column(String(50), nullable=False, index=True, comment="讲师用户ID")

    # 价格信息
    price = Column(Numeric(10, 2), nullable=False, default=0, comment="价格")
    discount = Column(Numeric(5, 2), nullable=False, default=0, comment="平台折扣百分比")

    # 课程详情
    duration = Column(Integer, default=0, comment="课程时长(分钟)")
    difficulty = Column(String(20), comment="难度等级")
    tags = Column(JSON, default=list, comment="课程标签")
    status = Column(String(20), default="ongoing", comment="课程状态")
    is_published = Column(Boolean, default=False, comment="是否已发布")

    # 评分统计（只由评分聚合器写入）
    ratings_average = Column(Float, nullable=True, comment="平均评分")
    ratings_quantity = Column(Integer, nullable=False, default=0, comment="评分数量")

    # 时间
    created_at = Column(DateTime(timezone=True), server_default=func.now(), comment="创建时间")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), comment="更新时间")

    __table_args__ = (
        {'comment': '课程信息表'}
    )
