"""
评论相关数据模型
"""

from datetime import datetime
from typing import Iterable, List, Optional
from pydantic import BaseModel, Field, field_validator

REVIEW_MAX_LENGTH = 500


def _validate_text(v: str) -> str:
    if not v or not v.strip():
        raise ValueError("Review can not be empty!")
    if len(v) > REVIEW_MAX_LENGTH:
        raise ValueError("Review must be less than 500 characters!")
    return v


class Review(BaseModel):
    """评论基础模型"""

    review_id: str = Field(..., description="评论ID")
    course_id: str = Field(..., description="课程ID")
    user_id: str = Field(..., description="用户ID")
    review: str = Field(..., description="评论内容")
    rating: Optional[int] = Field(None, ge=1, le=5, description="评分，仅顶级评论")
    parent_review_id: Optional[str] = Field(None, description="父评论ID")
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def is_top_level(self) -> bool:
        return self.parent_review_id is None


class ReviewCreate(BaseModel):
    """创建顶级评论"""

    review: str
    rating: int = Field(..., ge=1, le=5)

    @field_validator("review")
    @classmethod
    def check_text(cls, v: str) -> str:
        return _validate_text(v)


class ReplyCreate(BaseModel):
    """创建回复（回复不带评分）"""

    review: str

    @field_validator("review")
    @classmethod
    def check_text(cls, v: str) -> str:
        return _validate_text(v)


class ReviewUpdate(BaseModel):
    """更新评论"""

    review: Optional[str] = None
    rating: Optional[int] = Field(None, ge=1, le=5)

    @field_validator("review")
    @classmethod
    def check_text(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _validate_text(v)


class ReviewThread(Review):
    """顶级评论及其回复"""

    replies: List[Review] = Field(default_factory=list)

    @classmethod
    def build(cls, reviews: Iterable[Review]) -> List["ReviewThread"]:
        """把平铺的评论列表组装成一层回复结构"""
        reviews = list(reviews)
        replies_by_parent = {}
        for review in reviews:
            if review.parent_review_id is not None:
                replies_by_parent.setdefault(review.parent_review_id, []).append(review)

        return [
            cls(**review.model_dump(), replies=replies_by_parent.get(review.review_id, []))
            for review in reviews
            if review.is_top_level
        ]


class RatingStats(BaseModel):
    """课程评分聚合结果"""

    average: Optional[float] = Field(None, ge=0, le=5)
    quantity: int = Field(default=0, ge=0)

    @classmethod
    def from_aggregate(cls, quantity: Optional[int], average) -> "RatingStats":
        """
        从 count/avg 聚合查询结果构造

        没有顶级评论时平均分为None而不是0，平均分不做四舍五入。
        """
        quantity = int(quantity or 0)
        if quantity == 0 or average is None:
            return cls(average=None, quantity=0)
        return cls(average=float(average), quantity=quantity)
