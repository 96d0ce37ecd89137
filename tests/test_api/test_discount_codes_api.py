"""
折扣码接口测试
"""

import pytest
from datetime import datetime, timedelta, timezone

from app.core.security import UserRole


@pytest.mark.asyncio
class TestApplyDiscountCodeAPI:
    """POST /api/v1/discount-codes/apply"""

    async def test_apply_success(self, client, user_headers, make_course, make_discount_code):
        course = await make_course(price="100", discount="10")
        await make_discount_code(course.course_id)

        response = await client.post(
            "/api/v1/discount-codes/apply",
            json={"code": "summer20", "courseId": course.course_id},
            headers=user_headers
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["discountedPrice"] == pytest.approx(72)
        assert body["message"] == "Discount of 20% applied successfully!"

    async def test_apply_requires_login(self, client, make_course):
        course = await make_course()

        response = await client.post(
            "/api/v1/discount-codes/apply",
            json={"code": "SUMMER20", "courseId": course.course_id}
        )

        assert response.status_code == 401
        assert response.json()["status"] == "fail"

    async def test_apply_invalid_code(self, client, user_headers, make_course):
        course = await make_course()

        response = await client.post(
            "/api/v1/discount-codes/apply",
            json={"code": "NOPE", "courseId": course.course_id},
            headers=user_headers
        )

        assert response.status_code == 400
        assert response.json() == {
            "status": "fail",
            "message": "Invalid or expired discount code for this course."
        }

    async def test_apply_unknown_course(self, client, user_headers):
        response = await client.post(
            "/api/v1/discount-codes/apply",
            json={"code": "SUMMER20", "courseId": "missing"},
            headers=user_headers
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Course not found."

    async def test_apply_twice(self, client, auth_headers, make_course, make_discount_code):
        course = await make_course()
        await make_discount_code(course.course_id)
        payload = {"code": "SUMMER20", "courseId": course.course_id}

        first = await client.post("/api/v1/discount-codes/apply", json=payload, headers=auth_headers("user_1"))
        second = await client.post("/api/v1/discount-codes/apply", json=payload, headers=auth_headers("user_2"))

        assert first.status_code == 200
        assert second.status_code == 400
        assert second.json()["message"] == "You have already used this discount code."


@pytest.mark.asyncio
class TestGeneralDiscountAPI:
    """POST /api/v1/discount-codes/all"""

    async def test_set_general_discount(self, client, admin_headers, make_course):
        await make_course(discount="0")
        await make_course(discount="0")

        response = await client.post("/api/v1/discount-codes/all", json={"discount": 30}, headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {
            "status": "success",
            "message": "Discounts set successfully for all courses",
            "modifiedCourses": 2
        }

    async def test_set_general_discount_requires_admin(self, client, user_headers, make_course):
        await make_course()

        response = await client.post("/api/v1/discount-codes/all", json={"discount": 30}, headers=user_headers)

        assert response.status_code == 403

    @pytest.mark.parametrize("discount", [150, -5, "ten"])
    async def test_set_general_discount_invalid(self, client, admin_headers, make_course, discount):
        await make_course()

        response = await client.post(
            "/api/v1/discount-codes/all", json={"discount": discount}, headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid discount value. It must be between 0 and 100."

    async def test_set_general_discount_without_courses(self, client, admin_headers):
        response = await client.post("/api/v1/discount-codes/all", json={"discount": 10}, headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "No courses were updated"


@pytest.mark.asyncio
class TestDiscountCodeAdminAPI:
    """折扣码管理接口"""

    async def test_create_and_list(self, client, admin_headers, make_course):
        course = await make_course()
        expires_at = (datetime.now(timezone.utc) + timedelta(days=7)).isoformat()

        created = await client.post(
            "/api/v1/discount-codes",
            json={
                "code": "welcome",
                "discountPercentage": 15,
                "course": course.course_id,
                "maxUsage": 3,
                "expiresAt": expires_at
            },
            headers=admin_headers
        )
        listed = await client.get("/api/v1/discount-codes", headers=admin_headers)

        assert created.status_code == 201
        data = created.json()["data"]
        assert data["code"] == "WELCOME"
        assert data["created_by"] == "admin_1"
        assert data["used_count"] == 0
        assert listed.json()["results"] == 1

    async def test_create_requires_admin(self, client, auth_headers, make_course):
        course = await make_course()

        response = await client.post(
            "/api/v1/discount-codes",
            json={
                "code": "welcome",
                "discountPercentage": 15,
                "course": course.course_id,
                "maxUsage": 3,
                "expiresAt": "2030-01-01T00:00:00Z"
            },
            headers=auth_headers("instructor_1", UserRole.INSTRUCTOR)
        )

        assert response.status_code == 403

    async def test_disable_code_blocks_redemption(self, client, admin_headers, user_headers,
                                                  make_course, make_discount_code):
        course = await make_course()
        db_code = await make_discount_code(course.course_id)

        patched = await client.patch(
            f"/api/v1/discount-codes/{db_code.discount_code_id}",
            json={"status": "disabled"},
            headers=admin_headers
        )
        applied = await client.post(
            "/api/v1/discount-codes/apply",
            json={"code": "SUMMER20", "courseId": course.course_id},
            headers=user_headers
        )

        assert patched.status_code == 200
        assert patched.json()["data"]["status"] == "disabled"
        assert applied.status_code == 400

    async def test_delete_code(self, client, admin_headers, make_course, make_discount_code):
        course = await make_course()
        db_code = await make_discount_code(course.course_id)

        deleted = await client.delete(f"/api/v1/discount-codes/{db_code.discount_code_id}", headers=admin_headers)
        missing = await client.delete(f"/api/v1/discount-codes/{db_code.discount_code_id}", headers=admin_headers)

        assert deleted.status_code == 204
        assert missing.status_code == 404
