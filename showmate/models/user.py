from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column
from showmate.models.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    """
    User profile as stored by the identity side of the app.

    The primary key is the uid carried in the bearer token's 'sub' claim.
    Profiles are read here to address emails and to copy contact fields
    onto memberships at invite time.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    first_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    photo_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    @property
    def greeting_name(self) -> str:
        """First name for email salutations, falling back to display name"""
        return self.first_name or self.display_name or ""

    @property
    def full_name(self) -> str:
        name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return name or self.display_name or self.email or self.id

    def __repr__(self) -> str:
        return f"<User(id='{self.id}', email='{self.email}')>"
