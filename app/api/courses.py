from fastapi import APIRouter, Depends, Query, Response, status

from app.api.dependencies import get_course_service, get_current_user, require_roles
from app.core.security import CurrentUser, UserRole
from app.models.course import CourseCreate, CourseUpdate, CourseResponse
from app.services.course_service import CourseService

router = APIRouter(prefix="/courses", tags=["课程"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_course(
    data: CourseCreate,
    user: CurrentUser = Depends(require_roles(UserRole.INSTRUCTOR, UserRole.ADMIN)),
    service: CourseService = Depends(get_course_service)
):
    """创建课程，讲师为当前用户"""
    course = await service.create_course(data, instructor_id=user.user_id)
    return {"status": "success", "data": {"course": CourseResponse.from_course(course)}}


@router.get("")
async def list_courses(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    service: CourseService = Depends(get_course_service)
):
    courses = await service.list_courses(limit=limit, offset=offset)
    return {
        "status": "success",
        "results": len(courses),
        "data": [CourseResponse.from_course(course) for course in courses]
    }


@router.get("/{slug}")
async def get_course(slug: str, service: CourseService = Depends(get_course_service)):
    """课程详情及评论树"""
    detail = await service.get_course_by_slug(slug)
    return {"status": "success", "data": detail}


@router.patch("/{course_id}")
async def update_course(
    course_id: str,
    data: CourseUpdate,
    user: CurrentUser = Depends(require_roles(UserRole.INSTRUCTOR, UserRole.ADMIN)),
    service: CourseService = Depends(get_course_service)
):
    course = await service.update_course(course_id, data)
    return {"status": "success", "data": {"course": CourseResponse.from_course(course)}}


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_course(
    course_id: str,
    user: CurrentUser = Depends(require_roles(UserRole.ADMIN)),
    service: CourseService = Depends(get_course_service)
):
    await service.delete_course(course_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
