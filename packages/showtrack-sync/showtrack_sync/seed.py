"""Seed the game catalogue from JSON definitions."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any

import structlog
from showtrack_core.models import Game

from showtrack_sync.storage.base import ResultRepository

logger = structlog.get_logger()

BUNDLED_GAMES = "games.json"


@dataclass(slots=True)
class SeedResult:
    """Outcome of a seeding run."""

    created: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped_existing: int = 0

    @property
    def skipped(self) -> bool:
        """True when seeding did not run because games already existed."""
        return self.skipped_existing > 0


def game_from_seed_dict(data: dict[str, Any]) -> Game:
    """
    Build a Game from a seed record.

    Seed records use ``apiName`` for the provider slug and ``fetch_url`` for the
    results endpoint; optional metadata defaults to empty.

    Raises:
        KeyError: If name, apiName or category is missing
    """
    return Game(
        name=data["name"],
        api_name=data["apiName"],
        category=data["category"],
        fetch_results_url=data.get("fetch_url") or None,
        provider=data.get("provider") or None,
        logo=data.get("logo") or None,
        description=data.get("description") or None,
        is_new=bool(data.get("is_new", False)),
        release_date=data.get("release_date") or None,
        rtp=data.get("rtp") or None,
        features=list(data.get("features") or []),
    )


def load_games_file(path: Path | None = None) -> list[dict[str, Any]]:
    """Read seed records from ``path``, or from the bundled catalogue when omitted."""
    if path is None:
        text = resources.files("showtrack_sync.data").joinpath(BUNDLED_GAMES).read_text("utf-8")
    else:
        text = Path(path).read_text(encoding="utf-8")

    data = json.loads(text)
    if not isinstance(data, list):
        raise ValueError("Games file must contain a JSON list of game definitions")
    return data


async def seed_games(
    repository: ResultRepository,
    games_data: list[dict[str, Any]],
    force: bool = False,
) -> SeedResult:
    """
    Load game definitions into an empty catalogue.

    Args:
        repository: Storage for games
        games_data: Seed records (see ``game_from_seed_dict``)
        force: Seed even when games already exist; known api names are skipped

    Returns:
        SeedResult with the api names created and those that failed
    """
    result = SeedResult()

    existing = await repository.count_games()
    if existing > 0 and not force:
        logger.info("seed_skipped", existing_games=existing)
        result.skipped_existing = existing
        return result

    logger.info("seed_started", games=len(games_data))

    for data in games_data:
        api_name = data.get("apiName") if isinstance(data, dict) else None
        try:
            if force and api_name and await repository.get_game_by_api_name(api_name):
                logger.debug("seed_game_exists", api_name=api_name)
                continue
            game = game_from_seed_dict(data)
            await repository.add_game(game)
            result.created.append(game.api_name)
        except Exception as e:
            logger.error("seed_game_failed", api_name=api_name, error=str(e))
            result.failed.append(str(api_name))

    logger.info("seed_completed", created=len(result.created), failed=len(result.failed))
    return result
