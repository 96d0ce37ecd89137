"""
评论数据库模型
"""

import uuid

from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, Index, text
from sqlalchemy.sql import func
from app.core.database import Base


class ReviewDB(Base):
    """评论数据库表（顶级评论与回复共用）"""

    __tablename__ = "reviews"

    review_id = Column(String(50), primary_key=True, default=lambda: uuid.uuid4().hex, comment="评论ID")
    course_id = Column(
        String(50),
        ForeignKey("courses.course_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="课程ID"
    )
    user_id = Column(String(50), nullable=False, index=True, comment="用户ID")
    review = Column(Text, nullable=False, comment="评论内容")
    rating = Column(Integer, nullable=True, comment="评分(1-5)，回复为空")
    parent_review_id = Column(
        String(50),
        ForeignKey("reviews.review_id", ondelete="CASCADE"),
        nullable=True,
        index=True,
        comment="父评论ID"
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now(), comment="创建时间")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), comment="更新时间")

    __table_args__ = (
        # 每个用户对每门课程最多一条顶级评论
        Index(
            "uq_reviews_course_user_top_level",
            "course_id",
            "user_id",
            unique=True,
            postgresql_where=text("parent_review_id IS NULL"),
            sqlite_where=text("parent_review_id IS NULL"),
        ),
        {'comment': '课程评论表'}
    )
