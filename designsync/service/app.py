"""FastAPI application entrypoint for designsync service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .. import __version__
from ..errors import ConfigError, DesignSyncError, ExitCode
from ..models import TokenCollection
from ..normalization import Normalizer
from ..stores import TTLCache
from ..tagging import TagContext, TagTemplateEngine


class TokenPayload(BaseModel):
    name: str
    type: str = "other"
    value: Any = None
    category: str = ""
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    attributes: Dict[str, Any] = Field(default_factory=dict)


class NormalizeRequest(BaseModel):
    name: str = "tokens"
    version: str = "1.0.0"
    source: str = ""
    tokens: List[TokenPayload]
    metadata: Dict[str, Any] = Field(default_factory=dict)
    enable_dark_mode: bool = False


class NormalizeResponse(BaseModel):
    name: str
    version: str
    source: str
    tokens: List[TokenPayload]
    metadata: Dict[str, Any]


class TagRequest(BaseModel):
    template: str
    branch: str = "main"
    repository_url: str = ""
    version: str = "1.0.0"
    design_platform: str = ""
    target_platform: str = ""
    target_repo: str = ""


class TagResponse(BaseModel):
    valid: bool
    placeholders: List[str] = Field(default_factory=list)
    tag: Optional[str] = None
    token_values: Dict[str, str] = Field(default_factory=dict)
    error: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    version: str


def create_app(
    tag_engine_factory: Callable[[], TagTemplateEngine] = TagTemplateEngine,
    color_cache: TTLCache | None = None,
) -> FastAPI:
    """Create the FastAPI application exposing normalization and tag previews."""
    app = FastAPI(title="designsync Service", version=__version__)
    cache = color_cache if color_cache is not None else TTLCache(max_entries=4096)

    async def get_tag_engine() -> TagTemplateEngine:
        return tag_engine_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    @app.post("/tokens/normalize", response_model=NormalizeResponse)
    async def normalize_tokens(payload: NormalizeRequest) -> NormalizeResponse:
        raw = TokenCollection.from_dict(payload.model_dump(exclude={"enable_dark_mode"}))
        normalizer = Normalizer(enable_dark_mode=payload.enable_dark_mode, color_cache=cache)

        loop = asyncio.get_running_loop()
        normalized = await loop.run_in_executor(None, normalizer.normalize, raw)
        return NormalizeResponse(**normalized.to_dict())

    @app.post("/tags/validate", response_model=TagResponse)
    async def validate_tag(
        payload: TagRequest,
        engine: TagTemplateEngine = Depends(get_tag_engine),
    ) -> TagResponse:
        try:
            placeholders = engine.validate(payload.template)
        except ConfigError as exc:
            return TagResponse(valid=False, error=str(exc))
        result = engine.generate(
            payload.template,
            TagContext(
                branch=payload.branch,
                repository_url=payload.repository_url,
                version=payload.version,
                design_platform=payload.design_platform,
                target_platform=payload.target_platform,
                target_repo=payload.target_repo,
            ),
        )
        return TagResponse(
            valid=True,
            placeholders=placeholders,
            tag=result.generated_tag,
            token_values=result.token_values,
        )

    @app.exception_handler(DesignSyncError)
    async def designsync_error_handler(_: Any, exc: DesignSyncError) -> JSONResponse:
        status = 400 if exc.exit_code in (ExitCode.INVALID_CONFIGURATION, ExitCode.TOKEN_EXTRACTION_FAILURE) else 500
        return JSONResponse(
            status_code=status,
            content={"detail": str(exc), "exit_code": int(exc.exit_code), "error": exc.exit_code.name},
        )

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    uvicorn.run(create_app(), host=host, port=port)


__all__ = ["create_app", "run_service"]
