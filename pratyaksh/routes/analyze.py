"""
analyze.py — Authenticity analysis endpoints.

Routes:
  POST /api/v1/analyze                — start a background analysis of an uploaded file
  GET  /api/v1/analyze/{analysis_id}  — fetch the finished report
  POST /api/v1/analyze/direct         — analyse base64 media synchronously
  GET  /api/v1/progress/{analysis_id} — progress of a background analysis

HOW THE DATA FLOWS
──────────────────
1. The front-end uploads the file (POST /api/v1/upload) and gets a file id.
2. POST /api/v1/analyze schedules run_analysis() as a background task and
   returns analysis-<file_id> immediately.
3. run_analysis() hands the bytes to the AnalysisDispatcher, which tries each
   available API key in order and falls back to a placeholder report when
   none succeeds. Progress stages are updated along the way, and the
   uploaded bytes are dropped once the report is stored.
4. The front-end polls /progress until completed, then GETs the report.

Analysis failures never surface as errors: the report is either the model's
or the fallback (source = "success" | "fallback"). Only malformed requests
get a 4xx.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status

from pratyaksh.ai.dispatcher import AnalysisDispatcher, get_dispatcher
from pratyaksh.ai.errors import InvalidMediaError
from pratyaksh.core.rate_limit import limiter
from pratyaksh.models.analysis import (
    AnalysisResultResponse,
    AnalyzeRequest,
    AnalyzeStartedResponse,
    DirectAnalyzeRequest,
    ProgressResponse,
)
from pratyaksh.services.analysis_store import AnalysisStore, analysis_store
from pratyaksh.services.file_storage import FileStore, file_store
from pratyaksh.services.media import decode_b64, mime_from_filename

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["analyze"])

_ANALYSIS_PREFIX = "analysis-"


async def run_analysis(
    analysis_id: str,
    file_id: str,
    dispatcher: AnalysisDispatcher,
    files: FileStore = file_store,
    store: AnalysisStore = analysis_store,
) -> None:
    """Background task: dispatch the stored file and record progress + result."""
    try:
        store.advance(analysis_id, 1)
        stored = files.get(file_id)
        if stored is None:
            logger.error("File not found in storage: %s", file_id)
            store.fail(analysis_id)
            return

        store.advance(analysis_id, 2)
        store.advance(analysis_id, 3)
        outcome = await dispatcher.analyze(stored.metadata.type, stored.metadata.original_name, stored.data)

        store.advance(analysis_id, 4)
        store.advance(analysis_id, 5)
        store.complete(analysis_id, outcome)
        files.delete(file_id)
        logger.info("Analysis %s complete (source=%s)", analysis_id, outcome.kind.value)
    except Exception:
        logger.exception("Analysis process failed: %s", analysis_id)
        store.fail(analysis_id)


@router.post("/analyze", response_model=AnalyzeStartedResponse, status_code=200)
@limiter.limit("20/minute")
async def start_analysis(
    request: Request,
    payload: AnalyzeRequest,
    background_tasks: BackgroundTasks,
    dispatcher: AnalysisDispatcher = Depends(get_dispatcher),
):
    """Schedule analysis of an uploaded file; 404 if the file id is unknown or expired."""
    if file_store.get(payload.file_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found or expired")

    analysis_id = f"{_ANALYSIS_PREFIX}{payload.file_id}"
    analysis_store.advance(analysis_id, 1)
    background_tasks.add_task(run_analysis, analysis_id, payload.file_id, dispatcher)
    return AnalyzeStartedResponse(analysis_id=analysis_id)


@router.get("/analyze/{analysis_id}", response_model=AnalysisResultResponse)
async def get_analysis_result(analysis_id: str):
    outcome = analysis_store.get_result(analysis_id)
    if outcome is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Analysis not found or not completed")
    return AnalysisResultResponse.from_outcome(outcome)


@router.post("/analyze/direct", response_model=AnalysisResultResponse, status_code=200)
@limiter.limit("20/minute")
async def analyze_direct(
    request: Request,
    payload: DirectAnalyzeRequest,
    dispatcher: AnalysisDispatcher = Depends(get_dispatcher),
):
    """Analyse base64 media in one request (used by scripts and the extension)."""
    try:
        data = decode_b64(payload.media_b64)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    media_type = payload.media_type or mime_from_filename(payload.filename)
    try:
        outcome = await dispatcher.analyze(media_type, payload.filename, data)
    except InvalidMediaError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return AnalysisResultResponse.from_outcome(outcome)


@router.get("/progress/{analysis_id}", response_model=ProgressResponse)
async def get_progress(analysis_id: str):
    return analysis_store.get_progress(analysis_id)
