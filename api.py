"""
PDF Rule Checker — FastAPI Server
=================================

HTTP boundary around the analysis pipeline.

Endpoints:
    POST /api/pdf/analyze   Upload a PDF plus up to three rules
    GET  /ping              Liveness check
    GET  /health            Readiness check (judge configured?)

Run:
    uvicorn api:app --reload              # Dev (http://localhost:8000)
    uvicorn api:app --host 0.0.0.0        # Production

Docs:
    http://localhost:8000/docs             # Swagger UI (auto-generated)
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from pdf_rule_checker import __version__
from pdf_rule_checker.config import JudgeSettings
from pdf_rule_checker.exceptions import ConfigurationError, RuleCheckError
from pdf_rule_checker.judge import ModelJudge
from pdf_rule_checker.models import AnalysisResult
from pdf_rule_checker.pipeline import AnalysisPipeline

load_dotenv()

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 10 * 1_048_576

# Client-facing status per error code. Codes absent here are server faults.
_STATUS_BY_CODE: dict[str, int] = {
    "RULES_INVALID": 400,
    "PAGE_COUNT_OUT_OF_RANGE": 400,
    "EXTRACTION_FAILED": 400,
    "LLM_PROTOCOL_ERROR": 502,
    "JUDGE_BACKEND_FAILED": 502,
}

# Messages that must not leak backend internals to the caller.
_GENERIC_MESSAGES: dict[str, str] = {
    "LLM_PROTOCOL_ERROR": "The model returned an invalid response",
    "JUDGE_BACKEND_FAILED": "The model backend is unavailable",
}

_FALLBACK_MESSAGE = "Failed to analyze PDF"


# ─── Application Lifespan (build the judge once) ────────────────────

_pipeline: AnalysisPipeline | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Read judge settings and build the pipeline on startup."""
    global _pipeline  # noqa: PLW0603
    try:
        _pipeline = AnalysisPipeline(ModelJudge(JudgeSettings.from_env()))
    except ConfigurationError as e:
        logger.error("Pipeline not initialised: %s", e)
    yield
    _pipeline = None


# ─── FastAPI App ─────────────────────────────────────────────────────

app = FastAPI(
    title="PDF Rule Checker API",
    description=(
        "Checks a short PDF against natural-language rules. "
        "An LLM judges each rule with evidence; page-count rules are "
        "decided by code."
    ),
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# ─── Response Schemas ───────────────────────────────────────────────


class AnalyzeResponse(BaseModel):
    """Envelope returned by /api/pdf/analyze."""

    success: bool
    message: str
    data: Optional[AnalysisResult] = None


class HealthResponse(BaseModel):
    status: str
    version: str
    model: str


# ─── Helpers ─────────────────────────────────────────────────────────


def _get_pipeline() -> AnalysisPipeline:
    if _pipeline is None:
        raise HTTPException(status_code=503, detail="Pipeline not initialised")
    return _pipeline


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
    )


# ─── Error Handlers ─────────────────────────────────────────────────


@app.exception_handler(RuleCheckError)
async def rule_check_error_handler(request: Request, exc: RuleCheckError) -> JSONResponse:
    status_code = _STATUS_BY_CODE.get(exc.code, 500)
    if status_code >= 500:
        logger.error("Analysis failed [%s]: %s %s", exc.code, exc, exc.details)
        message = _GENERIC_MESSAGES.get(exc.code, _FALLBACK_MESSAGE)
    else:
        logger.info("Request rejected [%s]: %s", exc.code, exc)
        message = exc.message
    return _failure(status_code, message)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected error while analyzing PDF")
    return _failure(500, _FALLBACK_MESSAGE)


# ─── Endpoints ───────────────────────────────────────────────────────


@app.post(
    "/api/pdf/analyze",
    summary="Check a PDF against up to three rules",
    tags=["Analysis"],
    responses={
        400: {"description": "Missing/invalid PDF, bad rules, or page count out of range"},
        413: {"description": "File too large"},
        502: {"description": "Judge backend failed or answered malformed JSON"},
        503: {"description": "Pipeline not yet initialised"},
    },
)
async def analyze_pdf(
    file: Optional[UploadFile] = File(None),
    rule1: str = Form(""),
    rule2: str = Form(""),
    rule3: str = Form(""),
) -> AnalyzeResponse:
    """Upload a 2–10 page PDF and up to three rules.

    Returns one verdict per non-empty rule:
    - **status**: `pass` or `fail`
    - **evidence**: one sentence from the document
    - **reasoning**: short explanation
    - **confidence**: 0–100 (always 100 for page-count rules)
    """
    if file is None:
        return _failure(400, "PDF file is required")
    if file.content_type != "application/pdf":
        return _failure(400, "Only PDF files are allowed")
    if file.size and file.size > MAX_UPLOAD_BYTES:
        return _failure(413, "File too large (max 10 MB)")

    if _pipeline is None:
        return _failure(503, "Pipeline not initialised")

    data = await file.read()
    result = await asyncio.to_thread(
        _pipeline.analyze, file.filename or "document.pdf", data, [rule1, rule2, rule3]
    )
    return AnalyzeResponse(
        success=True,
        message="PDF parsed and rules captured successfully",
        data=result,
    )


@app.get("/ping", summary="Liveness check", tags=["System"])
def ping() -> dict:
    return {"ok": True}


@app.get(
    "/health",
    summary="Health check",
    tags=["System"],
    responses={503: {"description": "Pipeline not yet initialised"}},
)
def health_check() -> HealthResponse:
    """Returns service status and the configured judge model."""
    pipeline = _get_pipeline()
    return HealthResponse(
        status="healthy",
        version=__version__,
        model=pipeline.judge.settings.model,
    )
