"""
TriTimes API

FastAPI application for triathlon result browsing, athlete search and
percentile histograms.
"""

from contextlib import asynccontextmanager
import logging
from pathlib import Path
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.api.v1.router import api_router
from app.features.athletes import AthleteSearchService
from app.features.athletes.artifacts import read_courses, read_race_histograms
from app.features.races import HistogramStore, RaceCatalog


# === Logging Setup ===
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
    ]
)
logger = logging.getLogger(__name__)


def create_app(
    data_dir: Path | None = None,
    catalog: RaceCatalog | None = None,
    search_service: AthleteSearchService | None = None,
    histogram_store: HistogramStore | None = None,
) -> FastAPI:
    """Build the API. Services not passed in are created from `data_dir`."""
    data_dir = Path(data_dir or settings.data_dir)

    # === Lifespan ===
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events."""
        logger.info(f"Starting TriTimes API (data: {data_dir})...")

        app.state.catalog = catalog or RaceCatalog(data_dir)
        app.state.search_service = search_service or AthleteSearchService.from_data_dir(data_dir)
        if histogram_store is not None:
            app.state.histogram_store = histogram_store
        else:
            loader = None
            if settings.use_precomputed_histograms:
                loader = lambda slug: read_race_histograms(data_dir, slug)  # noqa: E731
            app.state.histogram_store = HistogramStore(app.state.catalog, loader=loader)
        app.state.courses = read_courses(data_dir)

        # Fail at startup, not on the first search, if the index is broken
        app.state.search_service.load()
        logger.info(f"Races in manifest: {len(app.state.catalog.races)}")

        yield

        logger.info("Shutting down...")

    app = FastAPI(
        title="TriTimes API",
        description="Triathlon results, athlete search and percentile histograms",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # === Middleware ===
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    # === Routes ===
    app.include_router(api_router, prefix="/api/v1")

    # === Health Check ===
    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": "0.1.0",
            "athletes": app.state.search_service.unique_athletes,
        }

    return app


app = create_app()
