# bookstore/models/user.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Customer or staff account.

    Role:
      - "user" | "admin"

    Credentials are not stored here; identity for the workflows comes
    from `bookstore.core.auth.AuthenticatedPrincipal`.
    """

    __tablename__ = "users"

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    full_name: str | None = Field(
        default=None,
        max_length=255,
        description="Customer display name",
    )

    email: str = Field(
        max_length=255,
        unique=True,
        index=True,
    )

    phone: str | None = Field(
        default=None,
        max_length=20,
    )

    # Application role
    role: str = Field(
        default="user",
        max_length=20,
        index=True,
        description="Application role: user | admin",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
