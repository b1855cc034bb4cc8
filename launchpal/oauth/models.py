from datetime import datetime, timezone
from sqlalchemy import String, DateTime, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from launchpal.shared.db import Base
import json

class OAuthClient(Base):
    __tablename__ = "oauth_clients"
    client_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    # bcrypt hash; NULL for public clients
    client_secret_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    name: Mapped[str] = mapped_column(String(200))
    redirect_uris_json: Mapped[str] = mapped_column(Text, default="[]")
    scope: Mapped[str] = mapped_column(String(200), default="read write")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    @property
    def redirect_uris(self) -> list[str]:
        try:
            return json.loads(self.redirect_uris_json or "[]")
        except json.JSONDecodeError:
            return []

    @redirect_uris.setter
    def redirect_uris(self, val: list[str]):
        self.redirect_uris_json = json.dumps(val or [])

    @property
    def is_confidential(self) -> bool:
        return self.client_secret_hash is not None

class AuthorizationCode(Base):
    __tablename__ = "oauth_codes"
    code: Mapped[str] = mapped_column(String(128), primary_key=True)
    client_id: Mapped[str] = mapped_column(String(64), ForeignKey("oauth_clients.client_id", ondelete="CASCADE"), index=True)
    user_id: Mapped[str] = mapped_column(String(32), ForeignKey("users.id", ondelete="CASCADE"))
    scope: Mapped[str] = mapped_column(String(200))
    redirect_uri: Mapped[str] = mapped_column(String(1000))
    code_challenge: Mapped[str] = mapped_column(String(128))
    code_challenge_method: Mapped[str] = mapped_column(String(10), default="S256")
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    consumed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
