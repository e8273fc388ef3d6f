import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from league.config import settings
from league.database import init_db

log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    log.info("Survivor League started (week %s)", _current_week())
    yield


def _current_week() -> int:
    from league.engine.season import current_week
    return current_week()


def create_app() -> FastAPI:
    app = FastAPI(title="Survivor League", version="0.1.0", lifespan=lifespan)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    from league.api.auth import router as auth_router
    from league.api.users import router as users_router, invite_router
    from league.api.catalog import router as catalog_router
    from league.api.contestants import router as contestants_router
    from league.api.season import router as season_router
    from league.api.events import router as events_router
    from league.api.game_events import router as game_events_router
    from league.api.draft import router as draft_router
    from league.api.scores import router as scores_router
    from league.api.simulation import router as simulation_router

    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(invite_router)
    app.include_router(catalog_router)
    app.include_router(contestants_router)
    app.include_router(season_router)
    app.include_router(events_router)
    app.include_router(game_events_router)
    app.include_router(draft_router)
    app.include_router(scores_router)
    app.include_router(simulation_router)

    @app.get("/")
    async def root():
        return {"status": "ok", "app": "Survivor League"}

    return app


app = create_app()
