"""
User Model

A user owns expenses and carries the monthly budget that summaries are
measured against. Credentials live with the identity provider, not here.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from expense_tracker.clock import utc_now


EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class User(BaseModel):
    """A registered user and their monthly budget."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique user ID"
    )
    email: str = Field(
        ...,
        max_length=254,
        pattern=EMAIL_PATTERN,
        description="Login email, unique across users"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name"
    )
    monthly_budget: Annotated[
        Decimal,
        Field(ge=0, description="Monthly spending budget")
    ] = Decimal("0")
    created_at: datetime = Field(
        default_factory=utc_now
    )

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Emails compare case-insensitively."""
        return v.lower()
