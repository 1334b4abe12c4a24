from datetime import datetime, timezone
from uuid import uuid4
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    """A registered account.

    Attributes:
        id: Opaque identifier assigned at signup
        email: Login key, stored lower-cased
        hashed_password: bcrypt hash; never leaves the server
        created_at: Timestamp when the user signed up
        updated_at: Timestamp of the last change
    """
    __tablename__ = "users"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    email: str = Field(unique=True, index=True, max_length=320)
    hashed_password: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
