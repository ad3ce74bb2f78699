"""SQLAlchemy ORM models for LyricSpot."""

from datetime import UTC, datetime

import sqlalchemy as sa
from sqlalchemy import Float, Index, LargeBinary, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from lyricspot.domain.entities import utc_now


# Hey future me - SQLite doesn't preserve timezone info! UTC datetimes come back "naive".
# ALWAYS run DB timestamps through this before comparing with utc_now(), or the cooldown
# checks blow up with "can't compare offset-naive and offset-aware datetimes".
def ensure_utc_aware(dt: datetime | None) -> datetime | None:
    """Ensure datetime is UTC-aware, assuming naive datetimes are UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


class Base(DeclarativeBase):
    """Base class for all ORM models (shared metadata registry)."""

    pass


# Listen up, LibraryItemModel mirrors the LibraryItem entity 1:1. The import step (not us)
# creates rows; the enrichment engines only ever UPDATE them. artwork_data is a BLOB
# because the engines embed the cover directly (max 2 MiB, enforced by the fetcher).
class LibraryItemModel(Base):
    """One song in the local library."""

    __tablename__ = "library_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    file_path: Mapped[str] = mapped_column(Text, nullable=False, default="")
    title: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    artist: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    album: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    duration: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    artwork_data: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    artwork_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    metadata_source: Mapped[str | None] = mapped_column(String(50), nullable=True)
    last_enriched_at: Mapped[datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )
    last_metadata_attempt_at: Mapped[datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )
    lyrics_path: Mapped[str | None] = mapped_column(Text, nullable=True)
    lyrics_source: Mapped[str | None] = mapped_column(String(50), nullable=True)
    last_lyrics_fetched_at: Mapped[datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )
    last_lyrics_attempt_at: Mapped[datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utc_now
    )

    # list_ids() pages in insertion order
    __table_args__ = (Index("ix_library_items_created_at", "created_at"),)


class ArtistAvatarModel(Base):
    """Artist image keyed by normalized artist name."""

    __tablename__ = "artist_avatars"

    artist_key: Mapped[str] = mapped_column(String(500), primary_key=True)
    artist_name: Mapped[str] = mapped_column(String(500), nullable=False)
    image_data: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    source: Mapped[str] = mapped_column(String(50), nullable=False, default="itunes")
    # Locked = the user picked this image, bulk refreshes leave it alone
    is_locked: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    source_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utc_now
    )


class AppSettingsModel(Base):
    """Dynamic application settings stored in DB.

    Key-value store for runtime configuration. Unlike env vars, these
    can be changed at runtime without a restart.

    Keys used by the enrichment engines:
    - 'enrichment.lyrics.source' ("lrclib" | "localOnly")
    - 'enrichment.correction.threshold' (float, 0.5-1.0)
    - 'enrichment.cache.hours' (float, 1-168)
    """

    __tablename__ = "app_settings"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 'string', 'float'
    value_type: Mapped[str] = mapped_column(
        String(20), nullable=False, server_default="string", default="string"
    )
    category: Mapped[str] = mapped_column(
        String(50), nullable=False, server_default="general", default="general"
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    __table_args__ = (Index("ix_app_settings_category", "category"),)
