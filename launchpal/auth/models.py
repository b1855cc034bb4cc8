from datetime import datetime, timezone
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, DateTime, Integer
from launchpal.shared.db import Base
import uuid

def _id32() -> str:
    return uuid.uuid4().hex

class User(Base):
    __tablename__ = "users"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_id32)
    email: Mapped[str] = mapped_column(String, unique=True, index=True)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    password_hash: Mapped[str] = mapped_column(String)
    api_key: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    subscription: Mapped[str] = mapped_column(String(16), default="free")  # free|starter|pro
    customer_id: Mapped[str | None] = mapped_column(String(128), nullable=True)

    # limits change only through billing.update_subscription
    monthly_requests: Mapped[int] = mapped_column(Integer, default=100)
    platform_limit: Mapped[int] = mapped_column(Integer, default=1)
    product_limit: Mapped[int] = mapped_column(Integer, default=3)

    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    @property
    def limits(self) -> dict:
        return {
            "monthly_requests": self.monthly_requests,
            "platforms": self.platform_limit,
            "products": self.product_limit,
        }
