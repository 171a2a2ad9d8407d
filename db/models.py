"""
SQLAlchemy ORM models for the vocal practice platform.

Pitch series are stored as typed rows (one per sample, ordered by
``position``) so they are queryable and validated on the way in. Progress
records keep JSON snapshots of both compared sequences, because a snapshot
must not follow later edits of the recording or segment.
"""

from datetime import date, datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import (
    JSON,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _new_id() -> str:
    return str(uuid4())


class Base(DeclarativeBase):
    pass


class User(Base):
    """Practising singer. Every other row references a user id."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    full_name: Mapped[str | None] = mapped_column(String(256))
    email: Mapped[str | None] = mapped_column(String(256))
    gender: Mapped[str | None] = mapped_column(String(32))
    country_code: Mapped[str | None] = mapped_column(String(8))
    phone_number: Mapped[str | None] = mapped_column(String(32))
    age: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class Recording(Base):
    """A full song performance with its extracted pitch series.

    Immutable after creation; deleting a recording deletes its samples and
    segments.
    """

    __tablename__ = "recordings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(36), index=True)
    filename: Mapped[str] = mapped_column(String(512))
    duration: Mapped[str | None] = mapped_column(String(32))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    samples: Mapped[list["PitchSampleRow"]] = relationship(
        back_populates="recording",
        cascade="all, delete-orphan",
        order_by="PitchSampleRow.position",
    )
    segments: Mapped[list["Segment"]] = relationship(
        back_populates="recording", cascade="all, delete-orphan"
    )


class PitchSampleRow(Base):
    """One sample of a recording's pitch series."""

    __tablename__ = "pitch_samples"

    id: Mapped[int] = mapped_column(primary_key=True)
    recording_id: Mapped[str] = mapped_column(
        ForeignKey("recordings.id", ondelete="CASCADE"), index=True
    )
    position: Mapped[int] = mapped_column(Integer)
    time: Mapped[float] = mapped_column(Float)
    frequency: Mapped[float] = mapped_column(Float)

    recording: Mapped[Recording] = relationship(back_populates="samples")

    __table_args__ = (
        UniqueConstraint("recording_id", "position", name="uq_pitch_sample_position"),
    )


class Segment(Base):
    """Named ``[start_time, end_time]`` window over one recording."""

    __tablename__ = "segments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(36), index=True)
    recording_id: Mapped[str] = mapped_column(
        ForeignKey("recordings.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(256))
    start_time: Mapped[float] = mapped_column(Float)
    end_time: Mapped[float] = mapped_column(Float)

    recording: Mapped[Recording] = relationship(back_populates="segments")


class ProgressRecordRow(Base):
    """Append-only log entry for one scoring attempt."""

    __tablename__ = "progress_records"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36))
    reference_kind: Mapped[str] = mapped_column(String(16))
    reference_id: Mapped[str] = mapped_column(String(36))
    user_pitch_data: Mapped[list[dict[str, Any]]] = mapped_column(JSON)
    reference_pitch_data: Mapped[list[dict[str, Any]]] = mapped_column(JSON)
    total_entries: Mapped[int] = mapped_column(Integer)
    total_matches: Mapped[int] = mapped_column(Integer)
    accuracy: Mapped[str] = mapped_column(String(16))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (Index("idx_progress_user_id", "user_id", "id"),)


class StreakRow(Base):
    """Per-user streak. ``version`` guards conditional writes."""

    __tablename__ = "streaks"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), unique=True)
    current_streak: Mapped[int] = mapped_column(Integer)
    longest_streak: Mapped[int] = mapped_column(Integer)
    last_practice_date: Mapped[date] = mapped_column(Date)
    version: Mapped[int] = mapped_column(Integer, default=1)


class AchievementRow(Base):
    """Unlocked badge. At most one row per ``(user_id, title)``."""

    __tablename__ = "achievements"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), index=True)
    title: Mapped[str] = mapped_column(String(64))
    description: Mapped[str] = mapped_column(String(256))
    unlocked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    __table_args__ = (UniqueConstraint("user_id", "title", name="uq_achievement_user_title"),)
