"""FastAPI application entrypoint for apidoc service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, List, Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import ApiDocConfig, load_config
from ..errors import AccessError, ApiDocError, ConfigError, GenerationCancelled
from ..orchestrator import GenerationResult, Orchestrator


class GenerateRequest(BaseModel):
    path: str
    formats: Optional[List[str]] = None
    write: bool = False
    include_private: Optional[bool] = None


class OutputPayload(BaseModel):
    format: str
    filename: str
    content: str


class DiagnosticPayload(BaseModel):
    kind: str
    message: str
    path: str
    line: Optional[int] = None


class GenerateResponse(BaseModel):
    outputs: List[OutputPayload]
    diagnostics: List[DiagnosticPayload]
    written: List[str] = []


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing apidoc generation."""

    app = FastAPI(title="apidoc Service", version="1.0.0")

    async def get_orchestrator() -> Orchestrator:
        # A fresh orchestrator per request keeps pipeline state isolated.
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/generate", response_model=GenerateResponse)
    async def generate_docs(
        payload: GenerateRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> GenerateResponse:
        def _run_generate() -> GenerationResult:
            root = Path(payload.path).expanduser()
            config = load_config(root) if root.is_dir() else ApiDocConfig(root=root)
            if payload.formats:
                config.formats = list(payload.formats)
            if payload.include_private is not None:
                config.include_private = payload.include_private
            if not payload.write:
                config.output_dir = None
            return orchestrator.generate(root, config)

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, _run_generate)
        return GenerateResponse(
            outputs=[
                OutputPayload(format=output.format, filename=output.filename, content=output.content)
                for output in result.outputs
            ],
            diagnostics=[
                DiagnosticPayload(kind=item.kind, message=item.message, path=item.path, line=item.line)
                for item in result.diagnostics
            ],
            written=[str(path) for path in result.written],
        )

    @app.exception_handler(AccessError)
    async def access_error_handler(_: Any, exc: AccessError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Any, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(GenerationCancelled)
    async def cancelled_handler(_: Any, exc: GenerationCancelled) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(ApiDocError)
    async def apidoc_error_handler(_: Any, exc: ApiDocError) -> JSONResponse:
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    app = create_app()
    uvicorn.run(app, host=host, port=port)


__all__ = ["GenerateRequest", "GenerateResponse", "create_app", "run_service"]
