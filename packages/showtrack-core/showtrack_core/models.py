"""SQLModel database schema definitions."""

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime, Index, UniqueConstraint
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


def new_game_id() -> str:
    """Generate a primary key for a tracked game."""
    return str(uuid4())


class Game(SQLModel, table=True):
    """A tracked live game show."""

    __tablename__ = "casino_games"

    id: str = Field(default_factory=new_game_id, primary_key=True)
    name: str = Field(description="Display name")
    api_name: str = Field(index=True, unique=True, description="Provider slug")
    category: str = Field(description="Game category (e.g. game-show, roulette)")

    # Sync source; games without a URL are tracked but not synced
    fetch_results_url: str | None = Field(default=None, description="Results endpoint URL")

    # Provider metadata
    provider: str | None = Field(default=None, description="Game provider")
    logo: str | None = Field(default=None, description="Logo URL")
    description: str | None = Field(default=None, description="Marketing description")
    is_new: bool = Field(default=False, description="Recently released flag")
    release_date: str | None = Field(default=None, description="Release date as published")
    rtp: str | None = Field(default=None, description="Return-to-player as published")
    features: list[str] = Field(
        default_factory=list, sa_column=Column(JSON), description="Feature labels"
    )

    created_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True)),
        default_factory=utc_now,
        description="Record creation time",
    )
    updated_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True)),
        default_factory=utc_now,
        description="Record last update time",
    )


class GameResult(SQLModel, table=True):
    """One settled round of a game, keyed by (game_id, external_id)."""

    __tablename__ = "game_results"

    id: int | None = Field(default=None, primary_key=True)
    game_id: str = Field(foreign_key="casino_games.id", index=True, description="Game reference")
    external_id: str = Field(description="Provider round id, unique within a game")

    started_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False),
        description="Round start time",
    )
    settled_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
        description="Round settlement time",
    )
    status: str | None = Field(default=None, description="Provider status string")

    # Outcome shape depends on the game type; interpreted by showtrack_core.outcome
    outcome: dict = Field(
        default_factory=dict, sa_column=Column(JSON), description="Structured round outcome"
    )
    winners: list[dict] | None = Field(
        default=None, sa_column=Column(JSON), description="Ordered {screenName, winnings} list"
    )
    total_winners: int | None = Field(default=None, description="Provider winner count")
    total_amount: float | None = Field(default=None, description="Provider total payout")

    raw_payload: dict = Field(
        default_factory=dict, sa_column=Column(JSON), description="Complete provider record"
    )

    created_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True)),
        default_factory=utc_now,
        description="Record creation time",
    )
    updated_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True)),
        default_factory=utc_now,
        description="Record last update time",
    )

    __table_args__ = (
        UniqueConstraint("game_id", "external_id", name="uq_game_results_game_external"),
        Index("ix_game_results_game_settled", "game_id", "settled_at"),
    )
