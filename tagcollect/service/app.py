"""FastAPI application entrypoint for tagcollect service mode."""

from __future__ import annotations

import asyncio
import io
from typing import Any, Callable, Dict, List

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..config import CollectConfig
from ..exporter import AttributeExporter
from ..loader import LoaderError, program_from_dict
from ..models import MissingBodyError
from ..collector import TagCollector


class CollectRequest(BaseModel):
    program: Dict[str, Any]
    include_bodies: bool = True
    include_keys: bool = True


class ClassDocument(BaseModel):
    name: str
    attributes: int
    keys: int
    xml: str


class CollectResponse(BaseModel):
    classes: List[ClassDocument] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str


def _render(exporter: AttributeExporter, collector: TagCollector) -> str:
    buffer = io.StringIO()
    exporter.write_document(collector, buffer)
    return buffer.getvalue()


def _default_exporter(collect: CollectConfig) -> AttributeExporter:
    return AttributeExporter(collect=collect)


def create_app(
    exporter_factory: Callable[[CollectConfig], AttributeExporter] = _default_exporter,
) -> FastAPI:
    """Create the FastAPI application exposing tag collection."""

    app = FastAPI(title="tagcollect service", version="1.0.0")

    async def get_exporter_factory() -> Callable[[CollectConfig], AttributeExporter]:
        return exporter_factory

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/collect", response_model=CollectResponse)
    async def collect(
        payload: CollectRequest,
        factory: Callable[[CollectConfig], AttributeExporter] = Depends(get_exporter_factory),
    ) -> CollectResponse:
        def _run_collect() -> CollectResponse:
            program = program_from_dict(payload.program)
            exporter = factory(
                CollectConfig(include_bodies=payload.include_bodies, keys=payload.include_keys)
            )
            documents: List[ClassDocument] = []
            for program_class in program.classes:
                collector = exporter.collect_class(program_class)
                documents.append(
                    ClassDocument(
                        name=program_class.name,
                        attributes=len(collector.attributes),
                        keys=len(collector.keys),
                        xml=_render(exporter, collector),
                    )
                )
            return CollectResponse(classes=documents)

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, _run_collect)

    @app.exception_handler(LoaderError)
    async def loader_error_handler(_: Any, exc: LoaderError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(MissingBodyError)
    async def missing_body_handler(_: Any, exc: MissingBodyError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)
