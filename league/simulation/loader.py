"""Historical season loader -- ``season-<n>.json`` files under SIM_DATA_DIR."""
import json
import logging
import re
from pathlib import Path

from league.config import settings
from league.errors import NotFoundError

from .types import SimSeason

log = logging.getLogger(__name__)

_SEASON_FILE = re.compile(r"^season-(\d+)\.json$")

_cache: dict[int, SimSeason] = {}


def _data_dir() -> Path:
    return Path(settings.SIM_DATA_DIR).resolve()


def _season_files(directory: Path) -> dict[int, Path]:
    files = {}
    for path in directory.iterdir():
        match = _SEASON_FILE.match(path.name)
        if match:
            files[int(match.group(1))] = path
    return files


def load_season(season_number: int) -> SimSeason:
    if season_number in _cache:
        return _cache[season_number]

    path = _data_dir() / f"season-{season_number}.json"
    if not path.is_file():
        raise NotFoundError(f"Season {season_number} not found")

    with path.open(encoding="utf-8") as fh:
        season = SimSeason.from_dict(json.load(fh))
    log.info(
        "Loaded season %d: %d castaways, %d events",
        season.season, len(season.castaways), len(season.events),
    )
    _cache[season_number] = season
    return season


def get_available_seasons() -> list[int]:
    directory = _data_dir()
    if not directory.is_dir():
        return []
    return sorted(_season_files(directory))


def load_all_seasons() -> list[SimSeason]:
    seasons = get_available_seasons()
    if not seasons:
        raise NotFoundError(f"No season files found in {_data_dir()}")
    return [load_season(number) for number in seasons]


def clear_cache() -> None:
    _cache.clear()
