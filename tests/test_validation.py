"""Tests for input validation."""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from expense_tracker.clock import fixed_clock
from expense_tracker.config import AppSettings
from expense_tracker.models import ExpenseCategory, ExpenseCreate, ExpenseFilter, ExpenseUpdate
from expense_tracker.validation import ExpenseValidator, ValidationError


NOW = datetime(2026, 10, 19, 12, 0)


@pytest.fixture
def validator():
    return ExpenseValidator(clock=fixed_clock(NOW))


class TestSchemaValidation:
    """Stage 1: malformed input raises ValidationError."""

    def test_valid_create(self, validator):
        """Test that a well-formed payload passes."""
        payload = validator.validate_create({"amount": "99.90", "category": "Food"})

        assert isinstance(payload, ExpenseCreate)
        assert payload.amount == Decimal("99.90")
        assert payload.category == ExpenseCategory.FOOD

    def test_collects_every_issue(self, validator):
        """Test that all errors are reported, not just the first."""
        with pytest.raises(ValidationError) as exc_info:
            validator.validate_create({"amount": "-1", "category": "Groceries"})

        fields = sorted(issue.field for issue in exc_info.value.issues)
        assert fields == ["amount", "category"]
        assert all(issue.severity == "error" for issue in exc_info.value.issues)

    def test_missing_required_fields(self, validator):
        """Test that amount and category are required."""
        with pytest.raises(ValidationError) as exc_info:
            validator.validate_create({})

        assert {issue.issue_type for issue in exc_info.value.issues} == {"missing"}

    def test_error_to_dict(self, validator):
        """Test the serializable form of a validation error."""
        with pytest.raises(ValidationError) as exc_info:
            validator.validate_create({"amount": "-1", "category": "Food"})

        data = exc_info.value.to_dict()
        assert data["message"].startswith("Invalid expense input")
        assert data["issues"][0]["field"] == "amount"

    def test_update_is_partial(self, validator):
        """Test that absent update fields stay absent."""
        update = validator.validate_update({"note": "Dinner"})

        assert isinstance(update, ExpenseUpdate)
        assert update.changes() == {"note": "Dinner"}

    def test_filter_none_means_no_filter(self, validator):
        """Test that a missing filter is an empty one."""
        assert validator.validate_filter(None) == ExpenseFilter()

    def test_filter_rejects_unknown_keys(self, validator):
        """Test that unknown filter keys are rejected."""
        with pytest.raises(ValidationError):
            validator.validate_filter({"owner_id": "someone"})

    def test_budget(self, validator):
        """Test monthly budget validation."""
        assert validator.validate_budget("1500") == Decimal("1500")
        assert validator.validate_budget(0) == Decimal("0")

        with pytest.raises(ValidationError) as exc_info:
            validator.validate_budget(Decimal("-10"))
        assert exc_info.value.issues[0].field == "monthly_budget"

    def test_user(self, validator):
        """Test user validation."""
        user = validator.validate_user("Asha@Example.com", "Asha", "500")

        assert user.email == "asha@example.com"
        assert user.monthly_budget == Decimal("500")

        with pytest.raises(ValidationError, match="Invalid user input"):
            validator.validate_user("asha", "Asha")


class TestSemanticWarnings:
    """Stage 2: suspicious values are logged, never rejected."""

    def test_future_date_warning(self, validator):
        """Test that a far-future date is flagged but accepted."""
        future = NOW + timedelta(days=30)

        payload = validator.validate_create(
            {"amount": "10", "category": "Food", "date": future}
        )
        issues = validator._semantic_warnings(payload.amount, payload.date)

        assert payload.date == future
        assert [issue.issue_type for issue in issues] == ["future_date"]
        assert issues[0].severity == "warning"

    def test_near_future_within_tolerance(self, validator):
        """Test that dates inside the tolerance are not flagged."""
        assert validator._semantic_warnings(Decimal("10"), NOW + timedelta(days=3)) == []

    def test_large_amount_warning(self, validator):
        """Test that an unusually large amount is flagged."""
        issues = validator._semantic_warnings(Decimal("2000000"), None)

        assert [issue.issue_type for issue in issues] == ["suspicious_value"]

    def test_thresholds_from_settings(self):
        """Test that warning thresholds come from settings."""
        validator = ExpenseValidator.from_settings(
            AppSettings(max_expense_amount=Decimal("100"), future_date_tolerance_days=0),
            clock=fixed_clock(NOW),
        )

        issues = validator._semantic_warnings(Decimal("101"), NOW + timedelta(hours=1))

        assert sorted(issue.issue_type for issue in issues) == ["future_date", "suspicious_value"]


class TestPrebuiltModels:
    """Built request models skip stage 1 but still get stage 2."""

    @pytest.fixture
    def checked(self, validator, monkeypatch):
        calls = []
        original = validator._semantic_warnings

        def record(amount, occurred):
            issues = original(amount, occurred)
            calls.append([issue.issue_type for issue in issues])
            return issues

        monkeypatch.setattr(validator, "_semantic_warnings", record)
        return calls

    def test_create_model_is_checked(self, validator, checked):
        """Test that a built ExpenseCreate gets future-date and amount warnings."""
        payload = ExpenseCreate(
            amount=Decimal("2000000"),
            category=ExpenseCategory.FOOD,
            date=NOW + timedelta(days=30),
        )

        assert validator.validate_create(payload) is payload
        assert checked == [["future_date", "suspicious_value"]]

    def test_update_model_is_checked(self, validator, checked):
        """Test that a built ExpenseUpdate gets the same warnings as a mapping."""
        update = ExpenseUpdate(date=NOW + timedelta(days=30))

        assert validator.validate_update(update) is update
        validator.validate_update({"date": NOW + timedelta(days=30)})

        assert checked == [["future_date"], ["future_date"]]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
