from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from formassist.config import Settings
from formassist.errors import FormAssistError
from formassist.models import AuthSession, PipelineOk, TableReference
from formassist.pipeline import QueryPipeline
from formassist.resolver import parse_table_references
from formassist_api.deps import get_pipeline_dep, get_settings_dep
from formassist_api.models.ask import AskRequest, AskResponse

router = APIRouter()


@router.post("/ask", response_model=AskResponse)
async def ask(
    request: AskRequest,
    pipeline: Annotated[QueryPipeline, Depends(get_pipeline_dep)],
    settings: Annotated[Settings, Depends(get_settings_dep)],
) -> AskResponse:
    model = settings.llm.resolve_model(request.model)
    if not settings.llm.is_supported(model):
        raise HTTPException(
            status_code=422,
            detail=f"Unsupported model '{model}'. Supported: {', '.join(settings.llm.models)}",
        )

    if not settings.table_api.is_configured():
        raise HTTPException(status_code=503, detail="Table API base URL is not configured")

    if request.tables:
        refs = [TableReference(table_name=t.table_name, alias=t.alias) for t in request.tables]
    else:
        try:
            refs = parse_table_references(settings.default_table_references)
        except FormAssistError as e:
            raise HTTPException(status_code=500, detail=str(e))

    session = AuthSession(
        base_url=settings.table_api.base_url,
        token=request.token or settings.table_api.token,
    )

    result = await pipeline.run(
        request.question, refs, session, settings.llm.api_key or "", model
    )

    if isinstance(result, PipelineOk):
        return AskResponse(ok=True, answer=result.answer, usage=result.usage)

    return AskResponse(
        ok=False,
        stage=result.stage,
        error_type=result.error_type,
        message=result.message,
        table_name=result.table_name,
        display_text=result.display_text(),
    )
