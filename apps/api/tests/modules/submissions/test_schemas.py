"""
Tests for submission request schemas.
"""

import pytest
from pydantic import ValidationError

from volugram.modules.submissions.schemas import ConfirmRequest, ReviewCategoryIn


class TestReviewCategoryIn:
    def test_accepts_numeric_rating(self):
        category = ReviewCategoryIn(name="Teamwork", rating=4)
        assert category.rating == 4.0

    @pytest.mark.parametrize("rating", [float("nan"), float("inf"), float("-inf")])
    def test_rejects_non_finite_rating(self, rating):
        with pytest.raises(ValidationError):
            ReviewCategoryIn(name="Teamwork", rating=rating)

    def test_confirm_request_rejects_nan_rating(self):
        with pytest.raises(ValidationError):
            ConfirmRequest.model_validate(
                {
                    "language": "en",
                    "teamLeaderReview": [{"name": "Teamwork", "rating": float("nan")}],
                }
            )
