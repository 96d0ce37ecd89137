"""
折扣码相关数据模型
"""

from decimal import Decimal
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from enum import Enum


class DiscountCodeStatus(str, Enum):
    """折扣码状态枚举（只能由管理员修改，过期由expires_at动态判断）"""
    ACTIVE = "active"
    EXPIRED = "expired"
    DISABLED = "disabled"


def normalize_code(code: str) -> str:
    """折扣码统一去空格并转大写"""
    return code.strip().upper()


class DiscountCode(BaseModel):
    """折扣码基础模型"""

    discount_code_id: str = Field(..., description="折扣码ID")
    code: str = Field(..., min_length=1, max_length=50, description="折扣码")
    discount_percentage: Decimal = Field(..., ge=1, le=100, description="折扣百分比")
    course_id: str = Field(..., description="适用课程ID")
    max_usage: int = Field(..., ge=1, description="最大使用次数")
    used_count: int = Field(default=0, ge=0, description="已使用次数")
    created_by: str = Field(..., description="创建者用户ID")
    expires_at: datetime = Field(..., description="过期时间")
    min_purchase_amount: Decimal = Field(default=Decimal("0"), ge=0, description="最低消费金额")
    status: DiscountCodeStatus = Field(default=DiscountCodeStatus.ACTIVE, description="状态")
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)


class DiscountCodeCreate(BaseModel):
    """创建折扣码"""

    model_config = ConfigDict(populate_by_name=True)

    code: str = Field(..., min_length=1, max_length=50)
    discount_percentage: Decimal = Field(..., ge=1, le=100, alias="discountPercentage")
    course_id: str = Field(..., alias="course")
    max_usage: int = Field(..., ge=1, alias="maxUsage")
    expires_at: datetime = Field(..., alias="expiresAt")
    min_purchase_amount: Decimal = Field(default=Decimal("0"), ge=0, alias="minPurchaseAmount")

    @field_validator("code")
    @classmethod
    def normalize(cls, v: str) -> str:
        v = normalize_code(v)
        if not v:
            raise ValueError("Discount code can not be empty")
        return v


class DiscountCodeUpdate(BaseModel):
    """更新折扣码"""

    model_config = ConfigDict(populate_by_name=True)

    code: Optional[str] = Field(None, min_length=1, max_length=50)
    discount_percentage: Optional[Decimal] = Field(None, ge=1, le=100, alias="discountPercentage")
    max_usage: Optional[int] = Field(None, ge=1, alias="maxUsage")
    expires_at: Optional[datetime] = Field(None, alias="expiresAt")
    min_purchase_amount: Optional[Decimal] = Field(None, ge=0, alias="minPurchaseAmount")
    status: Optional[DiscountCodeStatus] = None

    @field_validator("code")
    @classmethod
    def normalize(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = normalize_code(v)
        if not v:
            raise ValueError("Discount code can not be empty")
        return v


class ApplyDiscountRequest(BaseModel):
    """使用折扣码请求"""

    model_config = ConfigDict(populate_by_name=True)

    code: str = Field(..., min_length=1)
    course_id: str = Field(..., alias="courseId")


class ApplyDiscountResult(BaseModel):
    """使用折扣码结果"""

    discounted_price: Decimal
    discount_percentage: Decimal
    message: str


class GeneralDiscountRequest(BaseModel):
    """全站折扣请求，数值范围在服务层校验"""

    discount: Any = None
