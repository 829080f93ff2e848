"""HTTP server for station audio.

Exposes the synthesis pipeline over FastAPI. Every failure is converted to a
JSON envelope at the route boundary; nothing is retried and a failed request
never touches the response cache.
"""

import hmac
import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exception_handlers import (
    http_exception_handler,
    request_validation_exception_handler,
)
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import __version__
from ..cache import AudioResponseCache
from ..config import StationVoiceConfig, load_config
from ..core import build_pipeline, create_provider
from ..providers.base import TTSProvider
from ..tts.errors import TTSError
from ..tts.models import SynthesisResult
from ..tts.pipeline import TTSPipeline

logger = logging.getLogger(__name__)

# Fixed probe used to check provider connectivity
TEST_TTS_VOICE_ID = "JBFqnCBsd6RMkjVDRZzb"
TEST_TTS_TEXT = "The first move is what sets everything in motion."

VOICE_FIELDS = ("id", "name", "description", "preview_url", "category")


class StationAudioRequest(BaseModel):
    """Body of a station-audio request."""

    text: str | None = None
    voice_id: str | None = None


class UnauthorizedError(Exception):
    """Raised when a protected route is called without the shared API key."""


def get_pipeline(request: Request) -> TTSPipeline:
    return request.app.state.pipeline


def require_api_key(request: Request) -> None:
    """Gate /api routes behind STATIONVOICE_API_KEY when one is configured.

    Accepts either ``Authorization: Bearer <key>`` or ``X-API-Key: <key>``.
    """
    expected = request.app.state.config.http.api_key
    if not expected:
        return

    supplied = [request.headers.get("x-api-key", "")]
    authorization = request.headers.get("authorization", "")
    if authorization.lower().startswith("bearer "):
        supplied.append(authorization[7:].strip())

    # Either header may carry the key
    if not any(
        candidate and hmac.compare_digest(candidate.encode(), expected.encode())
        for candidate in supplied
    ):
        raise UnauthorizedError()


def _audio_response(result: SynthesisResult) -> Response:
    return Response(
        content=result.audio,
        media_type="audio/mpeg",
        headers={
            "Cache-Control": "no-store, must-revalidate",
            "X-Cache": "HIT" if result.cached else "MISS",
        },
    )


def _failure(e: Exception, fallback: str) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": str(e) or fallback},
    )


router = APIRouter(prefix="/api", dependencies=[Depends(require_api_key)])


@router.post("/station-audio")
async def station_audio(
    body: StationAudioRequest | None = None,
    pipeline: TTSPipeline = Depends(get_pipeline),
) -> Response:
    """Return MP3 audio for a station prompt, served from cache when possible."""
    body = body or StationAudioRequest()
    try:
        result = await pipeline.process(body.text, body.voice_id)
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    except TTSError as e:
        logger.error(f"Station audio synthesis failed: {e}")
        return _failure(e, "Failed to generate audio")
    except Exception as e:
        logger.exception(f"Unexpected error in station audio: {e}")
        return _failure(e, "Failed to generate audio")

    logger.debug(
        f"Served {len(result.audio)} bytes for voice {result.voice_id} "
        f"({'cache hit' if result.cached else 'synthesized'})"
    )
    return _audio_response(result)


@router.get("/voices")
async def voices(pipeline: TTSPipeline = Depends(get_pipeline)) -> Response:
    """List the provider's voices."""
    try:
        available = await pipeline.list_voices()
    except Exception as e:
        logger.error(f"Error fetching voices: {e}")
        return _failure(e, "Failed to fetch voices")

    return JSONResponse(
        content=[
            {field: voice.get(field) for field in VOICE_FIELDS} for voice in available
        ]
    )


@router.post("/test-tts")
async def test_tts(pipeline: TTSPipeline = Depends(get_pipeline)) -> Response:
    """Synthesize a fixed sentence, bypassing the cache, to probe the provider."""
    try:
        result = await pipeline.process(TEST_TTS_TEXT, TEST_TTS_VOICE_ID, cache=False)
    except Exception as e:
        logger.error(f"Provider test synthesis failed: {e}")
        return _failure(e, "Failed to generate audio")

    return Response(content=result.audio, media_type="audio/mpeg")


def create_app(
    config: StationVoiceConfig | None = None,
    provider: TTSProvider | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    The response cache is created when the app starts and stopped (all
    expiry timers cancelled) when it shuts down.

    Args:
        config: Service configuration (loaded from file/env if None)
        provider: Synthesis provider (created from config at startup if None)
    """
    config = config or load_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        async with AudioResponseCache(ttl=config.cache.ttl_seconds) as cache:
            app.state.pipeline = build_pipeline(config, provider=provider, cache=cache)
            logger.info(
                f"stationvoice ready (provider={config.tts.provider}, "
                f"default voice={config.tts.default_voice_id})"
            )
            yield
        logger.info("stationvoice shut down")

    app = FastAPI(title="stationvoice", version=__version__, lifespan=lifespan)
    app.state.config = config
    app.include_router(router)

    @app.get("/status")
    async def status(request: Request) -> dict:
        pipeline: TTSPipeline = request.app.state.pipeline
        return {
            "status": "ok",
            "pid": os.getpid(),
            "provider": config.tts.provider,
            "cache": pipeline.cache.stats(),
        }

    @app.exception_handler(UnauthorizedError)
    async def _unauthorized(request: Request, exc: UnauthorizedError) -> JSONResponse:
        return JSONResponse(status_code=401, content={"error": "Unauthorized"})

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> Response:
        if exc.status_code == 405:
            return JSONResponse(
                status_code=405,
                content={"message": "Method not allowed"},
                headers=exc.headers,
            )
        return await http_exception_handler(request, exc)

    @app.exception_handler(RequestValidationError)
    async def _invalid_body(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        # Malformed or mistyped station-audio bodies carry no usable text
        if request.url.path == "/api/station-audio":
            return JSONResponse(status_code=400, content={"error": "Text is required"})
        return await request_validation_exception_handler(request, exc)

    return app


async def serve(
    config: StationVoiceConfig | None = None,
    host: str | None = None,
    port: int | None = None,
    log_level: str = "info",
) -> None:
    """Run the HTTP server until it is told to stop."""
    config = config or load_config()
    # Created here so credential errors surface before uvicorn starts
    provider = create_provider(config)
    server = uvicorn.Server(
        uvicorn.Config(
            create_app(config, provider=provider),
            host=host or config.http.host,
            port=port or config.http.port,
            log_level=log_level,
        )
    )
    logger.info(f"Listening on http://{server.config.host}:{server.config.port}")
    await server.serve()
