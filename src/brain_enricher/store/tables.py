"""SQLAlchemy declarative model for the ``contents`` table.

Only the columns the enrichment pipeline reads or writes are mapped. The
``metadata`` column holds ``ExtractedMetadata`` as JSON (JSONB on PostgreSQL).
"""

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

JSON_TYPE = sa.JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Declarative base for enrichment tables."""


class ContentRow(Base):
    __tablename__ = "contents"
    __table_args__ = (
        # Poll query: pending rows ordered by creation time
        sa.Index("ix_contents_status_created", "enrichment_status", "created_at"),
    )

    id: Mapped[str] = mapped_column(sa.String(64), primary_key=True)
    link: Mapped[str] = mapped_column(sa.Text, nullable=False)
    type: Mapped[str] = mapped_column(sa.String(32), nullable=False)
    content_id: Mapped[str | None] = mapped_column(sa.String(255))
    title: Mapped[str | None] = mapped_column(sa.Text)

    enrichment_status: Mapped[str] = mapped_column(
        sa.String(16), nullable=False, default="pending"
    )
    enrichment_error: Mapped[str | None] = mapped_column(sa.Text)
    enrichment_retries: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    enriched_at: Mapped[datetime | None] = mapped_column(sa.DateTime(timezone=True))
    next_attempt_at: Mapped[datetime | None] = mapped_column(sa.DateTime(timezone=True))

    # "metadata" is reserved on declarative classes
    extracted_metadata: Mapped[dict | None] = mapped_column("metadata", JSON_TYPE)

    created_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)
