"""Tests for the owner-scoped expense and user repositories."""

from datetime import date, datetime, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from expense_tracker.models import ExpenseCategory, ExpenseFilter, ExpenseUpdate
from expense_tracker.services.storage import DuplicateError, NotFoundError
from expense_tracker.validation import ValidationError


NOW = datetime(2026, 10, 19, 12, 0)


class TestExpenseCreate:
    """Tests for recording expenses."""

    def test_create_defaults(self, repository, owner_id):
        """Test that date defaults to now and note to empty."""
        expense = repository.create(owner_id, Decimal("120.50"), "Food")

        assert expense.owner_id == owner_id
        assert expense.amount == Decimal("120.50")
        assert expense.category == ExpenseCategory.FOOD
        assert expense.note == ""
        assert expense.date == NOW
        assert expense.created_at == NOW
        assert expense.updated_at == NOW

    def test_create_with_plain_date(self, repository, owner_id):
        """Test that a calendar date is stored as midnight."""
        expense = repository.create(owner_id, "15", "Travel", note="Bus", date=date(2026, 10, 1))

        assert expense.date == datetime(2026, 10, 1, 0, 0)
        assert expense.note == "Bus"

    def test_created_expense_is_retrievable(self, repository, owner_id):
        """Test that a created expense can be fetched back."""
        expense = repository.create(owner_id, Decimal("10"), ExpenseCategory.BILLS)

        assert repository.find_one(owner_id, expense.id) == expense

    @pytest.mark.parametrize(
        "kwargs, field",
        [
            ({"amount": Decimal("-5"), "category": "Food"}, "amount"),
            ({"amount": "ten", "category": "Food"}, "amount"),
            ({"amount": Decimal("5"), "category": "Groceries"}, "category"),
            ({"amount": Decimal("5"), "category": "Food", "note": "x" * 201}, "note"),
            ({"amount": Decimal("5"), "category": "Food", "date": "yesterday"}, "date"),
        ],
    )
    def test_create_rejects_malformed_input(self, repository, owner_id, kwargs, field):
        """Test that malformed input raises ValidationError naming the field."""
        with pytest.raises(ValidationError) as exc_info:
            repository.create(owner_id, **kwargs)

        assert field in [issue.field for issue in exc_info.value.issues]
        assert repository.find(owner_id) == []

    def test_create_from_rejects_unknown_keys(self, repository, owner_id):
        """Test that payload keys outside the create schema are rejected."""
        with pytest.raises(ValidationError):
            repository.create_from(
                owner_id,
                {"amount": "5", "category": "Food", "owner_id": str(uuid4())},
            )

    def test_far_future_date_is_only_a_warning(self, repository, owner_id):
        """Test that suspicious values are stored anyway."""
        expense = repository.create(
            owner_id, Decimal("5000000"), "Shopping", date=NOW + timedelta(days=60)
        )

        assert repository.find_one(owner_id, expense.id).amount == Decimal("5000000")


class TestExpenseFind:
    """Tests for filtered listing."""

    @pytest.fixture
    def seeded(self, repository, owner_id, other_owner_id):
        return {
            "sep": repository.create(owner_id, "40", "Food", date=datetime(2026, 9, 20, 9, 0)),
            "oct_1": repository.create(owner_id, "100", "Food", date=datetime(2026, 10, 1, 8, 0)),
            "oct_5": repository.create(owner_id, "200", "Travel", date=datetime(2026, 10, 5, 18, 0)),
            "foreign": repository.create(other_owner_id, "999", "Food", date=datetime(2026, 10, 2)),
        }

    def test_find_all_newest_first(self, repository, owner_id, seeded):
        """Test that listing returns only the owner's records, newest first."""
        expenses = repository.find(owner_id)

        assert [e.id for e in expenses] == [
            seeded["oct_5"].id, seeded["oct_1"].id, seeded["sep"].id
        ]

    def test_find_never_returns_other_owners(self, repository, owner_id, seeded):
        """Test that every listed record belongs to the caller."""
        assert all(e.owner_id == owner_id for e in repository.find(owner_id))

    def test_find_by_category(self, repository, owner_id, seeded):
        """Test the category filter."""
        expenses = repository.find(owner_id, {"category": "Travel"})

        assert [e.id for e in expenses] == [seeded["oct_5"].id]

    def test_find_by_month(self, repository, owner_id, seeded):
        """Test the month/year filter."""
        expenses = repository.find(owner_id, {"month": 9, "year": 2026})

        assert [e.id for e in expenses] == [seeded["sep"].id]

    def test_end_date_includes_whole_day(self, repository, owner_id, seeded):
        """Test that a bare end date includes expenses later that day."""
        expenses = repository.find(
            owner_id, {"start_date": "2026-10-05", "end_date": "2026-10-05"}
        )

        assert [e.id for e in expenses] == [seeded["oct_5"].id]

    def test_range_takes_precedence_over_period(self, repository, owner_id, seeded):
        """Test that an explicit range wins over month/year."""
        expenses = repository.find(
            owner_id,
            ExpenseFilter(
                start_date=date(2026, 9, 1),
                end_date=date(2026, 9, 30),
                month=10,
                year=2026,
            ),
        )

        assert [e.id for e in expenses] == [seeded["sep"].id]

    def test_no_match_returns_empty_list(self, repository, owner_id, seeded):
        """Test that an empty result is a list, not an error."""
        assert repository.find(owner_id, {"month": 1, "year": 2020}) == []

    def test_owner_without_expenses(self, repository):
        """Test listing for an owner with no records."""
        assert repository.find(uuid4()) == []

    @pytest.mark.parametrize(
        "filters",
        [
            {"month": 10},
            {"month": 13, "year": 2026},
            {"start_date": "2026-10-05", "end_date": "2026-10-01"},
            {"category": "Groceries"},
        ],
    )
    def test_malformed_filter_rejected(self, repository, owner_id, filters):
        """Test that malformed filters raise ValidationError."""
        with pytest.raises(ValidationError):
            repository.find(owner_id, filters)


class TestExpenseOwnership:
    """Tests for owner scoping of single-record operations."""

    def test_foreign_id_fails_like_missing_id(self, repository, owner_id, other_owner_id):
        """Test that another owner's expense is indistinguishable from a missing one."""
        foreign = repository.create(other_owner_id, "50", "Food")
        missing_id = uuid4()

        with pytest.raises(NotFoundError) as foreign_exc:
            repository.find_one(owner_id, foreign.id)
        with pytest.raises(NotFoundError) as missing_exc:
            repository.find_one(owner_id, missing_id)

        assert str(foreign_exc.value) == f"Expense not found: {foreign.id}"
        assert str(missing_exc.value) == f"Expense not found: {missing_id}"

    def test_update_foreign_expense(self, repository, owner_id, other_owner_id):
        """Test that updating another owner's expense fails and changes nothing."""
        foreign = repository.create(other_owner_id, "50", "Food", note="mine")

        with pytest.raises(NotFoundError):
            repository.update(owner_id, foreign.id, {"note": "hijacked"})

        assert repository.find_one(other_owner_id, foreign.id).note == "mine"

    def test_delete_foreign_expense(self, repository, owner_id, other_owner_id):
        """Test that deleting another owner's expense fails and keeps it."""
        foreign = repository.create(other_owner_id, "50", "Food")

        with pytest.raises(NotFoundError):
            repository.delete(owner_id, foreign.id)

        assert repository.find_one(other_owner_id, foreign.id) == foreign


class TestExpenseUpdate:
    """Tests for partial updates."""

    def test_note_only_update(self, repository, owner_id, clock):
        """Test that absent fields are left unchanged."""
        original = repository.create(
            owner_id, "120.50", "Food", note="Lunch", date=datetime(2026, 10, 5, 13, 0)
        )
        clock.now = NOW + timedelta(hours=1)

        updated = repository.update(owner_id, original.id, {"note": "Team lunch"})

        assert updated.note == "Team lunch"
        assert updated.amount == original.amount
        assert updated.category == original.category
        assert updated.date == original.date
        assert updated.created_at == original.created_at
        assert updated.updated_at == NOW + timedelta(hours=1)
        assert repository.find_one(owner_id, original.id) == updated

    def test_update_with_model(self, repository, owner_id):
        """Test updates given as an ExpenseUpdate."""
        original = repository.create(owner_id, "10", "Food")

        updated = repository.update(
            owner_id, original.id, ExpenseUpdate(category=ExpenseCategory.HEALTH)
        )

        assert updated.category == ExpenseCategory.HEALTH
        assert updated.amount == Decimal("10")

    def test_none_fields_are_ignored(self, repository, owner_id):
        """Test that explicit None values are treated as absent."""
        original = repository.create(owner_id, "10", "Food", note="keep")

        updated = repository.update(owner_id, original.id, {"note": None, "amount": "12"})

        assert updated.note == "keep"
        assert updated.amount == Decimal("12")

    def test_empty_update_is_a_no_op(self, repository, owner_id, clock):
        """Test that an update without fields leaves the record untouched."""
        original = repository.create(owner_id, "10", "Food")
        clock.now = NOW + timedelta(days=1)

        assert repository.update(owner_id, original.id, {}) == original

    @pytest.mark.parametrize(
        "fields",
        [
            {"amount": "-1"},
            {"category": "Groceries"},
            {"note": "x" * 201},
            {"owner_id": str(uuid4())},
        ],
    )
    def test_malformed_update_rejected(self, repository, owner_id, fields):
        """Test that malformed updates raise ValidationError and change nothing."""
        original = repository.create(owner_id, "10", "Food")

        with pytest.raises(ValidationError):
            repository.update(owner_id, original.id, fields)

        assert repository.find_one(owner_id, original.id) == original


class TestExpenseDelete:
    """Tests for deletion."""

    def test_delete(self, repository, owner_id):
        """Test that a deleted expense is gone."""
        expense = repository.create(owner_id, "10", "Food")

        repository.delete(owner_id, expense.id)

        with pytest.raises(NotFoundError):
            repository.find_one(owner_id, expense.id)
        assert repository.find(owner_id) == []

    def test_delete_twice(self, repository, owner_id):
        """Test that deleting an already-deleted expense raises NotFoundError."""
        expense = repository.create(owner_id, "10", "Food")
        repository.delete(owner_id, expense.id)

        with pytest.raises(NotFoundError, match="Expense not found"):
            repository.delete(owner_id, expense.id)


class TestUserRepository:
    """Tests for registration and budgets."""

    def test_register(self, users):
        """Test registering a user."""
        user = users.register("Asha@Example.com", "Asha", Decimal("5000"))

        assert user.email == "asha@example.com"
        assert users.get(user.id) == user

    def test_duplicate_email_any_case(self, users):
        """Test that an email already registered in another case is rejected."""
        users.register("asha@example.com", "Asha")

        with pytest.raises(DuplicateError, match="User already exists with this email"):
            users.register("ASHA@example.com", "Someone Else")

    def test_register_rejects_bad_input(self, users):
        """Test that malformed registration raises ValidationError."""
        with pytest.raises(ValidationError):
            users.register("not-an-email", "Asha")
        with pytest.raises(ValidationError):
            users.register("asha@example.com", "")
        with pytest.raises(ValidationError):
            users.register("asha@example.com", "Asha", Decimal("-1"))

    def test_get_unknown_user(self, users):
        """Test that an unknown user id raises NotFoundError."""
        with pytest.raises(NotFoundError, match="User not found"):
            users.get(uuid4())

    def test_update_budget(self, users):
        """Test replacing the monthly budget."""
        user = users.register("asha@example.com", "Asha", Decimal("1000"))

        updated = users.update_budget(user.id, "2500.50")

        assert updated.monthly_budget == Decimal("2500.50")
        assert users.get(user.id).monthly_budget == Decimal("2500.50")

    @pytest.mark.parametrize("budget", [Decimal("-1"), "lots"])
    def test_update_budget_rejects_bad_values(self, users, budget):
        """Test that negative or non-numeric budgets are rejected."""
        user = users.register("asha@example.com", "Asha", Decimal("1000"))

        with pytest.raises(ValidationError, match="Budget cannot be negative or non-numeric"):
            users.update_budget(user.id, budget)

        assert users.get(user.id).monthly_budget == Decimal("1000")

    def test_update_budget_unknown_user(self, users):
        """Test that updating an unknown user's budget raises NotFoundError."""
        with pytest.raises(NotFoundError):
            users.update_budget(uuid4(), Decimal("10"))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
