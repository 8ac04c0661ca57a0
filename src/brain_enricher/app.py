"""FastAPI application with lifespan, intake and enrichment endpoints."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel

from brain_enricher.config import Settings, get_settings
from brain_enricher.exceptions import InvalidUrlError
from brain_enricher.extraction import ExtractorRegistry
from brain_enricher.fetch import SafeFetcher
from brain_enricher.intake import save_link
from brain_enricher.logging_config import configure_logging
from brain_enricher.models import ContentItem, ParsedContent
from brain_enricher.providers import ProviderRegistry
from brain_enricher.scheduler import EnrichmentScheduler
from brain_enricher.store import build_store

logger = logging.getLogger(__name__)

SERVICE_VERSION = "0.1.0"


class ClassifyRequest(BaseModel):
    url: str


class CreateContentRequest(BaseModel):
    link: str
    title: str | None = None


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app. Settings default to the environment, read at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Wire store, fetcher, registries and scheduler; tear down in reverse."""
        config = settings or get_settings()
        configure_logging(config.log_level)

        store = build_store(config)
        await store.initialize()
        fetcher = SafeFetcher.from_settings(config)
        scheduler = EnrichmentScheduler(
            store, ExtractorRegistry.from_settings(config, fetcher), config
        )

        app.state.settings = config
        app.state.store = store
        app.state.providers = ProviderRegistry.from_settings(config)
        app.state.scheduler = scheduler

        if config.enrichment_enabled:
            scheduler.start()
        else:
            logger.info("Background enrichment disabled")
        try:
            yield
        finally:
            await scheduler.stop()
            await fetcher.aclose()
            await store.close()

    app = FastAPI(title="Brain Enricher", version=SERVICE_VERSION, lifespan=lifespan)

    @app.get("/health")
    async def health():
        """Health check endpoint for container platforms and local development."""
        return {
            "status": "ok",
            "service": "brain-enricher",
            "version": SERVICE_VERSION,
        }

    @app.get("/providers")
    async def list_providers(request: Request) -> list[dict]:
        return request.app.state.providers.provider_info()

    @app.post("/classify", response_model=ParsedContent)
    async def classify(body: ClassifyRequest, request: Request):
        parsed = request.app.state.providers.classify(body.url)
        if parsed is None:
            raise HTTPException(status_code=400, detail=str(InvalidUrlError(body.url)))
        return parsed

    @app.post("/contents", response_model=ContentItem, status_code=201)
    async def create_content(body: CreateContentRequest, request: Request):
        try:
            return await save_link(
                request.app.state.store, request.app.state.providers, body.link, body.title
            )
        except InvalidUrlError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    @app.get("/contents/{item_id}", response_model=ContentItem)
    async def get_content(item_id: str, request: Request):
        item = await request.app.state.store.get(item_id)
        if item is None:
            raise HTTPException(status_code=404, detail="Content not found")
        return item

    @app.post("/enrichment/run")
    async def run_enrichment(request: Request, _: None = Depends(verify_scheduler)):
        """Run one enrichment tick now (for cron-style triggering)."""
        summary = await request.app.state.scheduler.tick()
        return summary.as_dict()

    @app.post("/contents/{item_id}/enrich", response_model=ContentItem)
    async def reenrich_content(
        item_id: str, request: Request, _: None = Depends(verify_scheduler)
    ):
        """Re-run extraction for an enriched, failed or skipped item."""
        item = await request.app.state.scheduler.reenrich(item_id)
        if item is None:
            raise HTTPException(status_code=404, detail="Content not found")
        return item

    return app


async def verify_scheduler(request: Request) -> None:
    """Verify the scheduler secret header for protected endpoints.

    Compares the X-Scheduler-Secret header against the configured secret.
    Raises HTTPException 403 if the header is missing, empty, or mismatched.
    """
    settings = request.app.state.settings
    secret = request.headers.get("X-Scheduler-Secret", "")
    if not settings.scheduler_secret or secret != settings.scheduler_secret:
        raise HTTPException(status_code=403, detail="Invalid scheduler secret")


app = create_app()
