from datetime import datetime, timezone
from sqlalchemy import String, DateTime, Integer, Float, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column
from launchpal.shared.db import Base

class LaunchMetric(Base):
    """One append-only metrics snapshot for a launched product."""
    __tablename__ = "launch_metrics"
    __table_args__ = (Index("ix_launch_metrics_owner_product", "user_id", "product_id", "timestamp"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(32), ForeignKey("users.id", ondelete="CASCADE"))
    product_id: Mapped[str] = mapped_column(String(32))
    launch_id: Mapped[str | None] = mapped_column(String(32), nullable=True, index=True)
    votes: Mapped[int] = mapped_column(Integer, default=0)
    comments: Mapped[int] = mapped_column(Integer, default=0)
    views: Mapped[int | None] = mapped_column(Integer, nullable=True)
    rank: Mapped[int | None] = mapped_column(Integer, nullable=True)
    engagement: Mapped[float] = mapped_column(Float, default=0.0)  # comments per vote
    velocity: Mapped[float] = mapped_column(Float, default=0.0)    # votes per hour
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
