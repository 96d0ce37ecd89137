"""
课程相关数据模型
"""

from decimal import Decimal
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from enum import Enum

from app.models.review import ReviewThread


class DifficultyLevel(str, Enum):
    """难度等级枚举"""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class CourseStatus(str, Enum):
    """课程状态枚举"""
    ONGOING = "ongoing"
    COMPLETED = "completed"


def calculate_final_price(price: Decimal, discount: Decimal) -> Decimal:
    """计算平台折扣后的价格，不低于0"""
    return max(Decimal("0"), price - price * discount / Decimal("100"))


class Course(BaseModel):
    """课程基础模型"""

    course_id: str = Field(..., description="课程唯一标识")
    title: str = Field(..., min_length=1, max_length=200, description="课程标题")
    slug: str = Field(..., description="由标题生成的唯一标识")
    description: str = Field(..., description="课程描述")
    short_description: Optional[str] = Field(None, description="简短描述")
    category_id: Optional[str] = Field(None, description="分类ID")
    instructor_id: str = Field(..., description="讲师用户ID")
    price: Decimal = Field(default=Decimal("0"), ge=0, description="课程价格")
    discount: Decimal = Field(default=Decimal("0"), ge=0, le=100, description="平台折扣百分比")
    duration: int = Field(default=0, ge=0, description="课程时长(分钟)")
    difficulty: Optional[DifficultyLevel] = Field(None, description="难度等级")
    tags: List[str] = Field(default_factory=list, description="课程标签")
    status: CourseStatus = Field(default=CourseStatus.ONGOING, description="课程状态")
    is_published: bool = Field(default=False, description="是否已发布")
    ratings_average: Optional[float] = Field(None, ge=0, le=5, description="平均评分")
    ratings_quantity: int = Field(default=0, ge=0, description="评分数量")
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def final_price(self) -> Decimal:
        return calculate_final_price(self.price, self.discount)


class CourseCreate(BaseModel):
    """创建课程数据模型"""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    short_description: Optional[str] = None
    category_id: Optional[str] = None
    price: Decimal = Field(default=Decimal("0"), ge=0)
    discount: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    duration: int = Field(default=0, ge=0)
    difficulty: Optional[DifficultyLevel] = None
    tags: List[str] = Field(default_factory=list)
    status: CourseStatus = CourseStatus.ONGOING
    is_published: bool = False

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Course must have a title!")
        return v

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: List[str]) -> List[str]:
        return [tag.strip() for tag in v if tag.strip()]


class CourseUpdate(BaseModel):
    """更新课程数据模型（评分字段只由评分聚合器维护）"""

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    short_description: Optional[str] = None
    category_id: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    discount: Optional[Decimal] = Field(None, ge=0, le=100)
    duration: Optional[int] = Field(None, ge=0)
    difficulty: Optional[DifficultyLevel] = None
    tags: Optional[List[str]] = None
    status: Optional[CourseStatus] = None
    is_published: Optional[bool] = None


class CourseResponse(BaseModel):
    """课程响应模型 - 用于API返回"""

    course_id: str
    title: str
    slug: str
    description: str
    short_description: Optional[str]
    category_id: Optional[str]
    instructor_id: str
    price: Decimal
    discount: Decimal
    final_price: Decimal
    duration: int
    difficulty: Optional[DifficultyLevel]
    tags: List[str]
    status: CourseStatus
    is_published: bool
    ratings_average: Optional[float]
    ratings_quantity: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_course(cls, course: Course) -> "CourseResponse":
        """从Course模型创建响应对象"""
        return cls(
            **course.model_dump(),
            final_price=course.final_price,
        )


class CourseDetail(BaseModel):
    """课程详情（含评论树）"""

    course: CourseResponse
    reviews: List[ReviewThread] = Field(default_factory=list)
