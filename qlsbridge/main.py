import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.gzip import GZipMiddleware

from qlsbridge import __version__
from qlsbridge.config import Settings
from qlsbridge.errors import register_error_handlers
from qlsbridge.logging_config import setup_logging

# Routers
from qlsbridge.routers import rankings as rankings_router
from qlsbridge.services.aggregator import RankingAggregator
from qlsbridge.services.qlstats import QLStatsClient

# Logging setup
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    setup_logging(settings.log_file, settings.log_level)
    logger.info(
        "Starting qlsbridge %s (upstream %s, timeout %ss, gzip %s)",
        __version__,
        settings.upstream_base_url,
        settings.request_timeout,
        settings.use_gzip,
    )
    yield
    if app.state.owns_qlstats:
        await app.state.qlstats.aclose()


def create_app(
    settings: Optional[Settings] = None,
    qlstats: Optional[QLStatsClient] = None,
) -> FastAPI:
    """Build the bridge application.

    Args:
        settings: Configuration; read from the environment when omitted.
        qlstats: Upstream client to use. When omitted one is created from
            ``settings.upstream_base_url`` and closed on shutdown.
    """
    settings = settings or Settings.from_env()

    app = FastAPI(
        title="QLStats Bridge",
        description="Aggregated player rankings for QLStats ranked servers",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.owns_qlstats = qlstats is None
    app.state.qlstats = qlstats or QLStatsClient.create(settings.upstream_base_url)
    app.state.aggregator = RankingAggregator(app.state.qlstats)

    if settings.use_gzip:
        app.add_middleware(GZipMiddleware, minimum_size=settings.gzip_minimum_size)

    register_error_handlers(app)
    app.include_router(rankings_router.router)

    # Healthcheck endpoint
    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


if __name__ == "__main__":
    import uvicorn

    settings = Settings.from_env()
    uvicorn.run(
        "qlsbridge.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=False,
    )
