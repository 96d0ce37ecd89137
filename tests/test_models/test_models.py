"""
数据模型测试
"""

import pytest
from decimal import Decimal
from datetime import datetime, timedelta

from pydantic import ValidationError

from app.models.course import calculate_final_price
from app.models.discount_code import DiscountCodeCreate, DiscountCodeUpdate, ApplyDiscountRequest, normalize_code
from app.models.review import Review, ReviewCreate, ReplyCreate, ReviewThread, RatingStats


class TestCoursePricing:
    """课程价格计算测试"""

    def test_final_price_applies_platform_discount(self):
        assert calculate_final_price(Decimal("100"), Decimal("10")) == Decimal("90")

    def test_final_price_without_discount(self):
        assert calculate_final_price(Decimal("59.90"), Decimal("0")) == Decimal("59.90")

    def test_final_price_never_negative(self):
        assert calculate_final_price(Decimal("100"), Decimal("100")) == Decimal("0")


class TestRatingStats:
    """评分聚合结果测试"""

    def test_empty_aggregate_has_null_average(self):
        stats = RatingStats.from_aggregate(0, None)
        assert stats.quantity == 0
        assert stats.average is None

    def test_average_is_not_rounded(self):
        stats = RatingStats.from_aggregate(3, Decimal("4.333333333333333"))
        assert stats.quantity == 3
        assert stats.average == pytest.approx(13 / 3)

    def test_none_quantity_treated_as_zero(self):
        assert RatingStats.from_aggregate(None, None) == RatingStats(average=None, quantity=0)


class TestReviewModels:
    """评论模型测试"""

    def test_top_level_review_requires_rating(self):
        with pytest.raises(ValidationError):
            ReviewCreate(review="Great")

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_range(self, rating):
        with pytest.raises(ValidationError):
            ReviewCreate(review="Great", rating=rating)

    def test_review_text_length_limit(self):
        with pytest.raises(ValidationError):
            ReviewCreate(review="x" * 501, rating=5)
        assert ReviewCreate(review="x" * 500, rating=5).review == "x" * 500

    def test_empty_reply_rejected(self):
        with pytest.raises(ValidationError):
            ReplyCreate(review="   ")

    def test_build_threads_groups_replies_under_parent(self):
        now = datetime.now()
        top_a = Review(review_id="a", course_id="c", user_id="u1", review="A", rating=5, created_at=now)
        top_b = Review(review_id="b", course_id="c", user_id="u2", review="B", rating=3,
                       created_at=now + timedelta(seconds=1))
        reply = Review(review_id="r", course_id="c", user_id="u3", review="thanks",
                       parent_review_id="a", created_at=now + timedelta(seconds=2))

        threads = ReviewThread.build([top_a, reply, top_b])

        assert [t.review_id for t in threads] == ["a", "b"]
        assert [r.review_id for r in threads[0].replies] == ["r"]
        assert threads[1].replies == []


class TestDiscountCodeModels:
    """折扣码模型测试"""

    def test_normalize_code(self):
        assert normalize_code("  summer20 ") == "SUMMER20"

    def test_create_accepts_camel_case_payload(self):
        data = DiscountCodeCreate(**{
            "code": "welcome",
            "discountPercentage": 25,
            "course": "course_1",
            "maxUsage": 5,
            "expiresAt": "2030-01-01T00:00:00Z",
        })
        assert data.code == "WELCOME"
        assert data.discount_percentage == Decimal("25")
        assert data.course_id == "course_1"
        assert data.min_purchase_amount == Decimal("0")

    @pytest.mark.parametrize("percentage", [0, 101])
    def test_percentage_range(self, percentage):
        with pytest.raises(ValidationError):
            DiscountCodeCreate(
                code="X",
                discount_percentage=percentage,
                course_id="c",
                max_usage=1,
                expires_at=datetime.now()
            )

    def test_max_usage_at_least_one(self):
        with pytest.raises(ValidationError):
            DiscountCodeCreate(
                code="X",
                discount_percentage=10,
                course_id="c",
                max_usage=0,
                expires_at=datetime.now()
            )

    def test_apply_request_alias(self):
        request = ApplyDiscountRequest(**{"code": "SUMMER20", "courseId": "course_1"})
        assert request.course_id == "course_1"

    def test_update_normalizes_code(self):
        assert DiscountCodeUpdate(code=" spring ").code == "SPRING"
        assert DiscountCodeUpdate().code is None

    @pytest.mark.parametrize("code", ["", "   "])
    def test_update_rejects_blank_code(self, code):
        with pytest.raises(ValidationError):
            DiscountCodeUpdate(code=code)
