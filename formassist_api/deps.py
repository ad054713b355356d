from __future__ import annotations

from formassist.config import Settings, get_settings
from formassist.pipeline import QueryPipeline

_pipeline: QueryPipeline | None = None


def get_settings_dep() -> Settings:
    return get_settings()


def get_pipeline_dep() -> QueryPipeline:
    global _pipeline
    if _pipeline is None:
        _pipeline = QueryPipeline.from_settings(get_settings())
    return _pipeline


async def close_pipeline() -> None:
    global _pipeline
    if _pipeline is not None:
        await _pipeline.close()
        _pipeline = None
