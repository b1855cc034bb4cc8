from datetime import datetime, timezone
from sqlalchemy import String, DateTime, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from launchpal.shared.db import Base
import uuid, json

def _id32() -> str:
    return uuid.uuid4().hex  # 32 chars

class Product(Base):
    __tablename__ = "products"
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_id32)
    user_id: Mapped[str] = mapped_column(String(32), ForeignKey("users.id", ondelete="CASCADE"), index=True)
    platform: Mapped[str] = mapped_column(String(32), index=True)
    platform_id: Mapped[str] = mapped_column(String(128))  # set once from the adapter result
    name: Mapped[str] = mapped_column(String(200))
    tagline: Mapped[str] = mapped_column(String(300))
    description: Mapped[str] = mapped_column(Text, default="")
    website: Mapped[str] = mapped_column(String(500))
    url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    # lists stored as JSON text for SQLite
    media_json: Mapped[str] = mapped_column(Text, default="[]")
    topics_json: Mapped[str] = mapped_column(Text, default="[]")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    @property
    def media(self) -> list[str]:
        try:
            return json.loads(self.media_json or "[]")
        except json.JSONDecodeError:
            return []

    @media.setter
    def media(self, val: list[str]):
        self.media_json = json.dumps(val or [])

    @property
    def topics(self) -> list[str]:
        try:
            return json.loads(self.topics_json or "[]")
        except json.JSONDecodeError:
            return []

    @topics.setter
    def topics(self, val: list[str]):
        self.topics_json = json.dumps(val or [])
