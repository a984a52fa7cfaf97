"""FastAPI app exposing the converter over HTTP."""

from __future__ import annotations

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import Response
from starlette.concurrency import run_in_threadpool

from opml2cxl import __version__
from opml2cxl.config import Settings, check_linking_phrase, load_settings
from opml2cxl.convert import convert_bytes
from opml2cxl.errors import ParseError
from opml2cxl.logging import configure_logging, conversion_context, get_logger
from opml2cxl.writer import to_bytes

CXL_MEDIA_TYPE = "application/xml"

logger = get_logger(__name__)


def _convert_payload(data: bytes, *, linking_phrase: str, settings: Settings) -> bytes:
    with conversion_context(source="http"):
        document = convert_bytes(
            data,
            linking_phrase=linking_phrase,
            stable_ids=settings.stable_ids,
        )
        return to_bytes(document, pretty_print=settings.pretty_print)


def create_app() -> FastAPI:
    """Create FastAPI app."""

    settings = load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="opml2cxl", version=__version__)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/convert")
    async def convert(
        request: Request,
        linking_phrase: str | None = Query(default=None, description="Linking-phrase text"),
    ) -> Response:
        if linking_phrase is None:
            linking_phrase = settings.linking_phrase
        try:
            check_linking_phrase(linking_phrase)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e

        data = await request.body()
        logger.info("API convert requested", extra={"body_len": len(data)})

        # Parsing and serialization are CPU-bound; keep them off the event loop.
        try:
            payload = await run_in_threadpool(
                _convert_payload, data, linking_phrase=linking_phrase, settings=settings
            )
        except ParseError as e:
            logger.info("Rejected request: %s", e)
            raise HTTPException(status_code=422, detail=str(e)) from e

        return Response(content=payload, media_type=CXL_MEDIA_TYPE)

    return app
