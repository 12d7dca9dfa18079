"""FastAPI application entrypoint for vibeedit service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable, Dict, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..config import load_config
from ..orchestrator import EditOrchestrator, Outcome

STATUS_BY_CODE: Dict[str, int] = {
    "invalid_argument": 400,
    "not_found": 404,
    "failed_precondition": 412,
    "patch_failure": 409,
    "validation_failure": 422,
    "classification_failure": 502,
    "generation_failure": 502,
    "internal": 500,
}


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SubmitEditRequest(_CamelModel):
    project_id: str = Field(alias="projectId")
    user_id: str = Field(alias="userId")
    prompt: str
    html: Optional[str] = None
    asset_url: Optional[str] = Field(default=None, alias="assetUrl")


class EditStatusRequest(_CamelModel):
    project_id: str = Field(alias="projectId")
    edit_id: str = Field(alias="editId")


class HistoryRequest(_CamelModel):
    project_id: str = Field(alias="projectId")
    limit: Optional[int] = Field(default=None, ge=1)


class ReindexRequest(_CamelModel):
    project_id: str = Field(alias="projectId")
    html: str


class IndexRequest(_CamelModel):
    project_id: str = Field(alias="projectId")


class ErrorLogsRequest(_CamelModel):
    limit: Optional[int] = Field(default=None, ge=1)


class HealthResponse(BaseModel):
    status: str


def status_for(outcome: Outcome) -> int:
    """HTTP status for an outcome; success and clarification requests are 200."""
    if outcome.success or outcome.code is None:
        return 200
    return STATUS_BY_CODE.get(outcome.code, 500)


def describe_request_error(exc: RequestValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "invalid value")
        problems.append(f"{location}: {message}" if location else message)
    return "Invalid request: " + "; ".join(problems)


def _default_orchestrator() -> EditOrchestrator:
    return EditOrchestrator.from_config(load_config(Path.cwd()))


def create_app(
    orchestrator_factory: Callable[[], EditOrchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing the edit pipeline operations."""

    app = FastAPI(title="VibeEdit Service", version="1.0.0")
    # One orchestrator per app so the in-memory store and project locks are shared.
    state: Dict[str, EditOrchestrator] = {}

    async def get_orchestrator() -> EditOrchestrator:
        if "orchestrator" not in state:
            state["orchestrator"] = orchestrator_factory()
        return state["orchestrator"]

    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        outcome = Outcome.failure(describe_request_error(exc), "invalid_argument")
        return JSONResponse(status_code=status_for(outcome), content=outcome.to_dict())

    async def _respond(run: Callable[[], Outcome]) -> JSONResponse:
        loop = asyncio.get_running_loop()
        outcome = await loop.run_in_executor(None, run)
        return JSONResponse(status_code=status_for(outcome), content=outcome.to_dict())

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/edits")
    async def submit_edit(
        payload: SubmitEditRequest,
        orchestrator: EditOrchestrator = Depends(get_orchestrator),
    ) -> JSONResponse:
        return await _respond(
            lambda: orchestrator.submit_edit(
                payload.project_id,
                payload.user_id,
                payload.prompt,
                payload.html,
                asset_url=payload.asset_url,
            )
        )

    @app.post("/edits/apply")
    async def apply_edit(
        payload: EditStatusRequest,
        orchestrator: EditOrchestrator = Depends(get_orchestrator),
    ) -> JSONResponse:
        return await _respond(lambda: orchestrator.apply_edit(payload.project_id, payload.edit_id))

    @app.post("/edits/revert")
    async def revert_edit(
        payload: EditStatusRequest,
        orchestrator: EditOrchestrator = Depends(get_orchestrator),
    ) -> JSONResponse:
        return await _respond(lambda: orchestrator.revert_edit(payload.project_id, payload.edit_id))

    @app.post("/history")
    async def history(
        payload: HistoryRequest,
        orchestrator: EditOrchestrator = Depends(get_orchestrator),
    ) -> JSONResponse:
        return await _respond(lambda: orchestrator.get_history(payload.project_id, payload.limit))

    @app.post("/reindex")
    async def reindex(
        payload: ReindexRequest,
        orchestrator: EditOrchestrator = Depends(get_orchestrator),
    ) -> JSONResponse:
        return await _respond(lambda: orchestrator.reindex(payload.project_id, payload.html))

    @app.post("/index")
    async def get_index(
        payload: IndexRequest,
        orchestrator: EditOrchestrator = Depends(get_orchestrator),
    ) -> JSONResponse:
        return await _respond(lambda: orchestrator.get_index(payload.project_id))

    @app.post("/metrics")
    async def metrics(
        orchestrator: EditOrchestrator = Depends(get_orchestrator),
    ) -> JSONResponse:
        return await _respond(orchestrator.get_metrics)

    @app.post("/errors")
    async def error_logs(
        payload: ErrorLogsRequest,
        orchestrator: EditOrchestrator = Depends(get_orchestrator),
    ) -> JSONResponse:
        return await _respond(lambda: orchestrator.get_error_logs(payload.limit))

    return app


def run_service(
    host: str = "0.0.0.0",
    port: int = 8000,
    orchestrator_factory: Callable[[], EditOrchestrator] = _default_orchestrator,
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app(orchestrator_factory)
    uvicorn.run(app, host=host, port=port)


__all__ = ["STATUS_BY_CODE", "create_app", "run_service", "status_for"]
