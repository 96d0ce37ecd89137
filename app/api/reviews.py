from fastapi import APIRouter, Depends, Query, Response, status

from app.api.dependencies import get_current_user, get_review_service
from app.core.security import CurrentUser
from app.models.review import ReviewCreate, ReplyCreate, ReviewUpdate
from app.services.review_service import ReviewService

router = APIRouter(tags=["评论"])


@router.post("/courses/{slug}/reviews", status_code=status.HTTP_201_CREATED)
async def create_review(
    slug: str,
    data: ReviewCreate,
    user: CurrentUser = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service)
):
    review = await service.create_review(slug, user.user_id, data)
    return {"status": "success", "data": {"review": review}}


@router.get("/courses/{slug}/reviews")
async def get_reviews_for_course(slug: str, service: ReviewService = Depends(get_review_service)):
    threads = await service.get_reviews_for_course(slug)
    return {"status": "success", "results": len(threads), "data": {"allReviews": threads}}


@router.post(
    "/courses/{course_id}/reviews/{review_id}/replies",
    status_code=status.HTTP_201_CREATED
)
async def create_reply(
    course_id: str,
    review_id: str,
    data: ReplyCreate,
    user: CurrentUser = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service)
):
    reply = await service.create_reply(course_id, review_id, user.user_id, data)
    return {"status": "success", "data": {"reply": reply}}


@router.get("/reviews")
async def list_reviews(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: ReviewService = Depends(get_review_service)
):
    reviews = await service.list_reviews(limit=limit, offset=offset)
    return {"status": "success", "results": len(reviews), "data": reviews}


@router.get("/reviews/{review_id}")
async def get_review(review_id: str, service: ReviewService = Depends(get_review_service)):
    review = await service.get_review(review_id)
    return {"status": "success", "data": review}


@router.patch("/reviews/{review_id}")
async def update_review(
    review_id: str,
    data: ReviewUpdate,
    user: CurrentUser = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service)
):
    review = await service.update_review(review_id, data, user)
    return {"status": "success", "data": review}


@router.delete("/reviews/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_review(
    review_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service)
):
    await service.delete_review(review_id, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
