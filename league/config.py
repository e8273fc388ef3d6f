import os
from datetime import datetime
from functools import lru_cache

from pydantic_settings import BaseSettings

# Heroku sets DATABASE_URL and PORT without a prefix; map them to
# the LEAGUE_-prefixed names that pydantic-settings expects.
if "DATABASE_URL" in os.environ and "LEAGUE_DATABASE_URL" not in os.environ:
    _url = os.environ["DATABASE_URL"]
    if _url.startswith("postgres://"):
        _url = _url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif _url.startswith("postgresql://"):
        _url = _url.replace("postgresql://", "postgresql+asyncpg://", 1)
    os.environ["LEAGUE_DATABASE_URL"] = _url

if "PORT" in os.environ and "LEAGUE_PORT" not in os.environ:
    os.environ["LEAGUE_PORT"] = os.environ["PORT"]


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./league.db"
    JWT_SECRET: str = "dev-secret-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 1440
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # Season calendar
    SEASON_PREMIERE: datetime = datetime.fromisoformat("2025-02-26T20:00:00-05:00")
    MAX_WEEK: int = 14

    # League rules
    PICKS_PER_PLAYER: int = 2
    REQUIRE_INVITE: bool = False

    # Simulator
    SIM_DATA_DIR: str = "data/survivor-seasons"
    SIM_NUM_PLAYERS: int = 8
    SIM_PICKS_PER_PLAYER: int = 2
    SIM_MAX_OWNERS: int = 2
    SIM_NUM_SIMULATIONS: int = 1000
    SIM_MAX_SIMULATIONS: int = 10000

    model_config = {"env_prefix": "LEAGUE_"}


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
