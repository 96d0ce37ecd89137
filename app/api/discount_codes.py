from fastapi import APIRouter, Depends, Response, status

from app.api.dependencies import get_current_user, get_discount_code_service, require_roles
from app.core.security import CurrentUser, UserRole
from app.models.discount_code import (
    ApplyDiscountRequest,
    DiscountCodeCreate,
    DiscountCodeUpdate,
    GeneralDiscountRequest
)
from app.services.discount_code_service import DiscountCodeService

router = APIRouter(prefix="/discount-codes", tags=["折扣码"])

admin_only = require_roles(UserRole.ADMIN)


@router.post("/apply")
async def apply_discount_code(
    data: ApplyDiscountRequest,
    user: CurrentUser = Depends(get_current_user),
    service: DiscountCodeService = Depends(get_discount_code_service)
):
    """使用折扣码，返回折后价格"""
    result = await service.apply_code(data.code, data.course_id, user.user_id)
    return {
        "status": "success",
        "discountedPrice": float(result.discounted_price),
        "message": result.message
    }


@router.post("/all")
async def set_general_discount(
    data: GeneralDiscountRequest,
    user: CurrentUser = Depends(admin_only),
    service: DiscountCodeService = Depends(get_discount_code_service)
):
    """为所有课程设置平台折扣"""
    modified = await service.set_general_discount(data.discount)
    return {
        "status": "success",
        "message": "Discounts set successfully for all courses",
        "modifiedCourses": modified
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_discount_code(
    data: DiscountCodeCreate,
    user: CurrentUser = Depends(admin_only),
    service: DiscountCodeService = Depends(get_discount_code_service)
):
    discount_code = await service.create_discount_code(data, created_by=user.user_id)
    return {"status": "success", "data": discount_code}


@router.get("")
async def list_discount_codes(
    user: CurrentUser = Depends(admin_only),
    service: DiscountCodeService = Depends(get_discount_code_service)
):
    discount_codes = await service.list_discount_codes()
    return {"status": "success", "results": len(discount_codes), "data": discount_codes}


@router.patch("/{discount_code_id}")
async def update_discount_code(
    discount_code_id: str,
    data: DiscountCodeUpdate,
    user: CurrentUser = Depends(admin_only),
    service: DiscountCodeService = Depends(get_discount_code_service)
):
    discount_code = await service.update_discount_code(discount_code_id, data)
    return {"status": "success", "data": discount_code}


@router.delete("/{discount_code_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_discount_code(
    discount_code_id: str,
    user: CurrentUser = Depends(admin_only),
    service: DiscountCodeService = Depends(get_discount_code_service)
):
    await service.delete_discount_code(discount_code_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
