from datetime import date

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Boolean, Date
from proclass.db.base import Base, TimestampMixin

ROLE_ADMIN = "admin"
ROLE_TEACHER = "teacher"


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(200), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=ROLE_TEACHER)  # admin | teacher
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    phone: Mapped[str | None] = mapped_column(String(40), nullable=True)
    # acesso do professor expira em expires_at, salvo se for isento
    expires_at: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_exempt: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def access_expired(self, today: date) -> bool:
        if self.is_admin or self.is_exempt or self.expires_at is None:
            return False
        return self.expires_at < today
