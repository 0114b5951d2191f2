from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from solo_subtitles import __version__
from solo_subtitles.errors import SubtitlePipelineError, ValidationError
from solo_subtitles.logging_setup import REQUEST_ID, setup_logging
from solo_subtitles.metrics import REQ_LATENCY
from solo_subtitles.service import SubtitleService, build_service
from solo_subtitles.settings import get_settings

setup_logging()
log = logging.getLogger("solo_subtitles.app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    owned = getattr(app.state, "service", None) is None
    if owned:
        app.state.service = build_service(get_settings())
    log.info("Started")
    yield
    log.info("Shutdown")
    if owned:
        await app.state.service.aclose()
        app.state.service = None


app = FastAPI(title="Solo Subtitles", version=__version__, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    incoming = request.headers.get("x-request-id")
    rid = incoming or uuid.uuid4().hex[:16]
    token = REQUEST_ID.set(rid)
    try:
        response = await call_next(request)
    finally:
        REQUEST_ID.reset(token)
    response.headers["X-Request-ID"] = rid
    return response


@app.exception_handler(SubtitlePipelineError)
async def pipeline_error_handler(request: Request, exc: SubtitlePipelineError) -> JSONResponse:
    if exc.status_code >= 500:
        log.warning("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
    else:
        log.info("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": type(exc).__name__},
    )


# ---------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------
def get_service(request: Request) -> SubtitleService:
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Service not ready")
    return service


def authenticate(request: Request) -> Optional[str]:
    """Resolve the bearer token to an identity, or None when it is not accepted."""
    header = request.headers.get("authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    token = token.strip()
    if token in get_settings().api_tokens:
        return f"token:{token[:6]}"
    return None


def require_user(request: Request) -> str:
    user = authenticate(request)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return user


def _split_languages(raw: Optional[List[str]]) -> Optional[List[str]]:
    if not raw:
        return None
    langs = [part.strip() for value in raw for part in value.split(",") if part.strip()]
    return langs or None


def _observe(route: str, started: float) -> None:
    REQ_LATENCY.labels(route=route).observe(time.time() - started)


# ---------------------------------------------------------------------
# Subtitle pipeline routes
# ---------------------------------------------------------------------
@app.get("/subtitles/search")
async def search_subtitles(
    cross_ref_id: Optional[str] = Query(None, alias="crossRefId"),
    anime_id: Optional[int] = Query(None, alias="animeId"),
    season: Optional[int] = Query(None),
    episode: Optional[int] = Query(None),
    languages: Optional[List[str]] = Query(None),
    mapping_service: Optional[str] = Query(None, alias="mappingService"),
    user: str = Depends(require_user),
    service: SubtitleService = Depends(get_service),
) -> JSONResponse:
    t0 = time.time()
    try:
        if bool(cross_ref_id) == (anime_id is not None):
            raise ValidationError("Provide exactly one of crossRefId or animeId", field="crossRefId")

        langs = _split_languages(languages)
        if cross_ref_id:
            results = await service.search_subtitles(cross_ref_id, season=season, episode=episode, languages=langs)
        else:
            results = await service.search_anime_subtitles(
                anime_id,
                season=season,
                episode=episode,
                languages=langs,
                mapping_service=mapping_service,
            )
    finally:
        _observe("search", t0)
    return JSONResponse([candidate.to_dict() for candidate in results])


@app.get("/subtitles/{file_id}")
async def download_subtitle(
    file_id: str,
    user: str = Depends(require_user),
    service: SubtitleService = Depends(get_service),
) -> JSONResponse:
    t0 = time.time()
    try:
        payload = await service.download_subtitle(file_id)
    finally:
        _observe("download", t0)
    return JSONResponse(payload)


@app.get("/subtitles/{file_id}/text")
async def extract_subtitle_text(
    file_id: str,
    start_time: str = Query(..., alias="startTime"),
    end_time: str = Query(..., alias="endTime"),
    user: str = Depends(require_user),
    service: SubtitleService = Depends(get_service),
) -> JSONResponse:
    t0 = time.time()
    try:
        payload = await service.extract_subtitle_text(file_id, start_time, end_time)
    finally:
        _observe("extract", t0)
    return JSONResponse(payload)


@app.get("/anime/{anime_id}/ids")
async def anime_ids(
    anime_id: int,
    mapping_service: Optional[str] = Query(None, alias="mappingService"),
    user: str = Depends(require_user),
    service: SubtitleService = Depends(get_service),
) -> JSONResponse:
    ids = await service.anime_ids(anime_id, mapping_service)
    if ids is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No mapping found for MAL ID {anime_id}")
    return JSONResponse(ids)


# ---------------------------------------------------------------------
# Health and metrics
# ---------------------------------------------------------------------
@app.get("/healthz")
async def healthz() -> JSONResponse:
    return JSONResponse({"status": "ok", "version": __version__})


@app.get("/metrics")
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
