"""
HTTP interface for SavOpt.

Routes
------
POST /api/goals-calculate
    Goals planner: minimum monthly budget meeting every goal.
POST /api/optimize-calculate
    Savings optimizer: evaluates ``monthlyBudget`` against the optimum.
GET /health
    Liveness probe.

Status Contract
---------------
- 200: JSON payload with ``Cache-Control: no-store``
- 400: ``{"error": "Invalid <field>"}`` for the first invalid field
- 405: ``{"error": "Method Not Allowed"}`` for non-POST calculate calls
- 500: ``{"error": "Calculation error"}``; the traceback is logged

Run with ``savopt serve`` or ``uvicorn savopt.api:app``.
"""

from __future__ import annotations
from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import AppSettings, EvaluationInput, HouseholdInput
from .planner import build_plan
from .types import ErrorDict

__all__ = ["create_app", "app"]

logger = logging.getLogger(__name__)

NO_STORE = {"Cache-Control": "no-store"}


def _error_body(message: str) -> ErrorDict:
    return {"error": message}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=_error_body(message))


def _validation_message(exc: RequestValidationError) -> str:
    """Name the first invalid top-level field, as ``Invalid <field>``."""
    for err in exc.errors():
        if err.get("type") == "json_invalid":
            return "Invalid JSON"
        loc = err.get("loc", ())
        if len(loc) > 1 and isinstance(loc[1], str):
            return f"Invalid {loc[1]}"
    return "Invalid request body"


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Parameters
    ----------
    settings : AppSettings, optional
        Process settings (``start_year`` pins the timeline calendar).
        Read from the environment when omitted.
    """
    settings = settings or AppSettings()
    api = FastAPI(title="SavOpt API")
    api.state.settings = settings

    @api.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError):
        message = _validation_message(exc)
        logger.info("Rejected %s: %s", request.url.path, message)
        return _error(400, message)

    @api.exception_handler(StarletteHTTPException)
    async def http_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @api.get("/health")
    def health():
        return {"status": "ok"}

    @api.post("/api/goals-calculate")
    def goals_calculate(household: HouseholdInput):
        try:
            plan = build_plan(household, "goals", start_year=settings.start_year)
        except Exception:
            logger.exception("Calculation error")
            return _error(500, "Calculation error")
        return JSONResponse(content=plan.payload, headers=NO_STORE)

    @api.post("/api/optimize-calculate")
    def optimize_calculate(household: EvaluationInput):
        try:
            plan = build_plan(household, "optimizer", start_year=settings.start_year)
        except Exception:
            logger.exception("Calculation error")
            return _error(500, "Calculation error")
        return JSONResponse(content=plan.payload, headers=NO_STORE)

    return api


app = create_app()
