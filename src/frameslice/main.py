"""
FrameSlice Main Application
===========================

FastAPI entry point for the frame slicing service.

Each plugin message type maps to one endpoint taking a typed request
and returning a typed result or a single error message.

Endpoints:
    GET  /              - Service information
    GET  /health        - Liveness probe plus upload configuration summary
    GET  /api/accounts  - Account ids available for upload
    POST /api/suggest   - Auto-suggested slices for a frame
    POST /api/push      - Slice, compress and upload an exported frame

Errors:
    SlicePipelineError subclasses are returned as {"error": "<message>"}
    with the status code carried by the error class.
    Request validation failures are returned the same way with status 400.
"""

import logging
import os
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from frameslice.config import Settings, settings
from frameslice.errors import SlicePipelineError
from frameslice.geometry.suggester import suggest_slices
from frameslice.imaging.compressor import AdaptiveCompressor
from frameslice.models.input import ManualSlice, PushRequest, SuggestRequest
from frameslice.models.output import AccountsResponse, SuggestResponse
from frameslice.pipeline.orchestrator import SlicePipeline
from frameslice.upload.client import ImageUploader, KlaviyoImageUploader, MockImageUploader
from frameslice.upload.credentials import ResolvedCredential, resolve_credential


logger = logging.getLogger(__name__)


_startup_time: float = 0.0


# =============================================================================
# Factories
# =============================================================================

def create_uploader(config: Settings, credential: ResolvedCredential) -> ImageUploader:
    """
    Create the upload backend for one invocation.

    Fails fast on an unknown backend name.
    """
    backend = config.upload.backend

    if backend == "klaviyo":
        return KlaviyoImageUploader(
            api_key=credential.api_key,
            revision=config.upload.revision,
            endpoint=config.upload.endpoint,
            timeout_seconds=config.upload.timeout_seconds,
        )

    elif backend == "mock":
        return MockImageUploader(base_url=config.upload.mock_base_url)

    else:
        raise ValueError(f"Unknown upload backend: {backend}")


def create_compressor(config: Settings) -> AdaptiveCompressor:
    return AdaptiveCompressor(
        default_quality=config.compression.default_quality,
        min_quality=config.compression.min_quality,
        target_kb=config.compression.target_kb,
        quality_step=config.compression.quality_step,
    )


def resolve_for_request(config: Settings, account_id) -> ResolvedCredential:
    return resolve_credential(
        account_id,
        config.accounts.bindings,
        default_key=config.accounts.default_api_key,
        default_source=config.accounts.default_source,
    )


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    global _startup_time

    _startup_time = time.time()
    logger.info(f"Starting {settings.service.name} {settings.service.version}")
    logger.info(
        f"Upload backend: {settings.upload.backend}, revision={settings.upload.revision}, "
        f"accounts={settings.listed_accounts()}"
    )
    logger.info(
        f"Compression: q={settings.compression.default_quality}->"
        f"{settings.compression.min_quality}, target={settings.compression.target_kb}KB"
    )

    yield

    logger.info("Shutdown complete")


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="FrameSlice",
    description="Slices design frames into compressed, uploaded email images",
    version=settings.service.version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SlicePipelineError)
async def pipeline_error_handler(request: Request, exc: SlicePipelineError) -> JSONResponse:
    logger.warning(f"{request.url.path} failed: {type(exc).__name__}: {exc}")
    return JSONResponse({"error": str(exc)}, status_code=exc.status_code)


def format_validation_errors(errors) -> str:
    """Flatten request validation errors into one message."""
    missing = []
    problems = []
    for error in errors:
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        if error.get("type") == "missing":
            missing.append(field)
        else:
            problems.append(f"{field or 'body'}: {error.get('msg', 'invalid')}")

    parts = []
    if missing:
        parts.append(f"Missing required fields: {', '.join(missing)}")
    parts.extend(problems)
    return "; ".join(parts) or "Invalid request body"


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = format_validation_errors(exc.errors())
    logger.warning(f"{request.url.path} rejected: {message}")
    return JSONResponse({"error": message}, status_code=400)


# =============================================================================
# HTTP Endpoints
# =============================================================================

@app.get("/")
async def root() -> JSONResponse:
    """Service information endpoint."""
    return JSONResponse({
        "service": "FrameSlice",
        "name": settings.service.name,
        "version": settings.service.version,
        "status": "running",
        "upload_backend": settings.upload.backend,
    })


@app.get("/health")
async def health() -> JSONResponse:
    """
    Liveness probe.

    Always returns 200 if the service is running.
    """
    return JSONResponse({
        "ok": True,
        "revision": settings.upload.revision,
        "mode": settings.service.mode,
        "targetSliceKb": settings.compression.target_kb,
        "accounts": settings.account_ids(),
        "uptime_seconds": round(time.time() - _startup_time, 1),
    })


@app.get("/api/accounts")
async def accounts() -> JSONResponse:
    """Account ids a push may name."""
    return JSONResponse(AccountsResponse(accounts=settings.listed_accounts()).to_wire())


@app.post("/api/suggest")
async def suggest(body: SuggestRequest) -> JSONResponse:
    """Suggest slices for a frame without exporting or uploading anything."""
    rects = suggest_slices(
        body.frame,
        header_height=body.header_height,
        footer_height=body.footer_height,
        max_slice_height=body.max_slice_height,
    )
    response = SuggestResponse(
        count=len(rects),
        slices=[ManualSlice.from_rect(r) for r in rects],
    )
    return JSONResponse(response.to_wire())


@app.post("/api/push")
async def push(body: PushRequest) -> JSONResponse:
    """Slice, compress and upload an exported frame."""
    credential = resolve_for_request(settings, body.account_id)

    pipeline = SlicePipeline(
        compressor=create_compressor(settings),
        uploader=create_uploader(settings, credential),
    )
    response = await pipeline.push(
        body,
        account_id=credential.account_id,
        mode=settings.service.mode,
    )

    logger.info(
        f"Pushed {response.slice_count} slice(s) for {response.batch_name!r} "
        f"(account={credential.account_id})"
    )
    return JSONResponse(response.to_wire())


# =============================================================================
# Main Entry Point
# =============================================================================

def run() -> None:
    import uvicorn

    port = int(os.environ.get("PORT", settings.server.port))

    uvicorn.run(
        "frameslice.main:app",
        host=settings.server.host,
        port=port,
        reload=False,
    )


if __name__ == "__main__":
    run()
