"""
折扣码业务服务层
折扣码管理、折扣码核销以及全站折扣设置
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, List, Optional

from sqlalchemy.exc import IntegrityError

from app.api.exceptions import (
    NotFoundError,
    DuplicateError,
    ValidationError,
    InvalidOrExpiredCodeError,
    UsageLimitReachedError,
    AlreadyUsedError,
    MinimumPurchaseNotMetError
)
from app.models.course import calculate_final_price
from app.models.discount_code import (
    DiscountCode,
    DiscountCodeCreate,
    DiscountCodeUpdate,
    ApplyDiscountResult,
    normalize_code
)
from app.repositories.course_repository import CourseRepository
from app.repositories.discount_code_repository import DiscountCodeRepository
from app.services.common_cache import course_cache

logger = logging.getLogger(__name__)

USAGE_LIMIT_MESSAGE = "This discount code has reached its maximum usage limit."
ALREADY_USED_MESSAGE = "You have already used this discount code."


def format_number(value: Any) -> str:
    """把金额/百分比格式化为不带多余小数位的字符串，例如 50.00 -> 50"""
    value = Decimal(str(value))
    if value == value.to_integral_value():
        return str(value.quantize(Decimal("1")))
    return str(value.normalize())


class DiscountCodeService:
    """折扣码业务服务"""

    def __init__(self, discount_repo: DiscountCodeRepository, course_repo: CourseRepository):
        self.discount_repo = discount_repo
        self.course_repo = course_repo
        self.cache = course_cache

    async def create_discount_code(self, data: DiscountCodeCreate, created_by: str) -> DiscountCode:
        """创建折扣码，创建者为当前管理员"""
        db_course = await self.course_repo.get_by_course_id(data.course_id)
        if not db_course:
            raise NotFoundError("Course not found.")

        if await self.discount_repo.get_by_code(data.code):
            raise DuplicateError("Discount code already exists.")

        values = data.model_dump()
        values["created_by"] = created_by

        try:
            db_code = await self.discount_repo.create(values)
            discount_code = self.discount_repo.to_model(db_code)
            await self.discount_repo.commit()
        except IntegrityError:
            await self.discount_repo.rollback()
            raise DuplicateError("Discount code already exists.")

        logger.info(f"折扣码已创建: {discount_code.code} -> 课程 {discount_code.course_id}")
        return discount_code

    async def list_discount_codes(self) -> List[DiscountCode]:
        db_codes = await self.discount_repo.list_all()
        return [self.discount_repo.to_model(db_code) for db_code in db_codes]

    async def update_discount_code(self, discount_code_id: str, data: DiscountCodeUpdate) -> DiscountCode:
        """更新折扣码（状态只能在这里由管理员修改）"""
        db_code = await self.discount_repo.get_by_id(discount_code_id)
        if not db_code:
            raise NotFoundError("No discount code found with that ID")

        values = data.model_dump(exclude_unset=True, exclude_none=True)
        if "status" in values:
            values["status"] = values["status"].value

        if "code" in values and values["code"] != db_code.code:
            if await self.discount_repo.get_by_code(values["code"]):
                raise DuplicateError("Discount code already exists.")

        if "max_usage" in values and values["max_usage"] < db_code.used_count:
            raise ValidationError("maxUsage can not be lower than the current usage count.")

        db_code = await self.discount_repo.update(discount_code_id, values)
        discount_code = self.discount_repo.to_model(db_code)
        await self.discount_repo.commit()
        return discount_code

    async def delete_discount_code(self, discount_code_id: str) -> None:
        deleted = await self.discount_repo.delete(discount_code_id)
        if not deleted:
            raise NotFoundError("No discount code found with that ID")
        await self.discount_repo.commit()

    async def apply_code(
        self,
        code: str,
        course_id: str,
        user_id: str,
        current_time: Optional[datetime] = None
    ) -> ApplyDiscountResult:
        """
        对某门课程使用折扣码

        检查顺序固定：存在/激活/未过期/适用课程 -> 使用上限 -> 已被使用 -> 最低消费。
        已被使用的判断是全局的（used_count > 0），并不区分用户。
        成功时使用次数通过条件UPDATE原子+1并提交；失败时不产生任何写入。
        """
        db_course = await self.course_repo.get_by_course_id(course_id)
        if not db_course:
            raise NotFoundError("Course not found.")

        total_price = calculate_final_price(
            Decimal(str(db_course.price)), Decimal(str(db_course.discount))
        )

        db_code = await self.discount_repo.find_redeemable(
            normalize_code(code),
            course_id,
            current_time or datetime.now(timezone.utc)
        )
        if not db_code:
            raise InvalidOrExpiredCodeError("Invalid or expired discount code for this course.")

        if db_code.used_count >= db_code.max_usage:
            raise UsageLimitReachedError(USAGE_LIMIT_MESSAGE)

        if db_code.used_count > 0:
            raise AlreadyUsedError(ALREADY_USED_MESSAGE)

        min_purchase = Decimal(str(db_code.min_purchase_amount or 0))
        if min_purchase > total_price:
            raise MinimumPurchaseNotMetError(
                f"Your purchase total is less than the required minimum of {format_number(min_purchase)}."
            )

        percentage = Decimal(str(db_code.discount_percentage))
        discounted_price = total_price - total_price * percentage / Decimal("100")

        incremented = await self.discount_repo.increment_usage(
            db_code.discount_code_id, expected_used_count=db_code.used_count
        )
        if not incremented:
            # 并发请求抢先核销，按最新状态给出对应错误
            fresh = await self.discount_repo.get_by_id(db_code.discount_code_id, refresh=True)
            if fresh is None:
                raise InvalidOrExpiredCodeError("Invalid or expired discount code for this course.")
            if fresh.used_count >= fresh.max_usage:
                raise UsageLimitReachedError(USAGE_LIMIT_MESSAGE)
            raise AlreadyUsedError(ALREADY_USED_MESSAGE)

        await self.discount_repo.commit()
        logger.info(f"用户 {user_id} 在课程 {course_id} 上使用了折扣码 {db_code.code}")

        return ApplyDiscountResult(
            discounted_price=discounted_price,
            discount_percentage=percentage,
            message=f"Discount of {format_number(percentage)}% applied successfully!"
        )

    async def set_general_discount(self, discount: Any) -> int:
        """
        为所有课程设置平台折扣

        没有任何课程被修改时视为NotFound，而不是空操作成功。
        """
        if (
            isinstance(discount, bool)
            or not isinstance(discount, (int, float, Decimal))
            or not 0 <= discount <= 100
        ):
            raise ValidationError("Invalid discount value. It must be between 0 and 100.")

        modified = await self.course_repo.set_discount_for_all(Decimal(str(discount)))
        if modified == 0:
            raise NotFoundError("No courses were updated")

        await self.course_repo.commit()
        await self.cache.delete_pattern("detail:*")

        logger.info(f"全站折扣已设置为 {discount}%，影响课程 {modified} 门")
        return modified
