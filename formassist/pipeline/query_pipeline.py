"""
Query pipeline for FormAssist.

Orchestrates the complete flow from a user's question to an answer:
1. Resolve the tables to load
2. Fetch every table into a QueryContext
3. Render the system and user prompts
4. Ask the chat completion endpoint

This is the only entry point presentation shells call. Every failure is
returned as a PipelineErr tagged with the stage it came from; nothing is
raised past ``run``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Optional

from formassist.context import ContextAssembler, PromptBuilder
from formassist.errors import FormAssistError, ValidationError
from formassist.gateway import TableGateway
from formassist.llm import CompletionClient
from formassist.models import (
    AuthSession,
    PipelineErr,
    PipelineOk,
    PipelineResult,
    PipelineStage,
    PipelineState,
    TableReference,
)
from formassist.resolver import TableResolver
from formassist.utils.logger import get_logger

if TYPE_CHECKING:
    from formassist.config import Settings

logger = get_logger(__name__)

StateListener = Callable[[PipelineState], None]


class QueryPipeline:
    """
    Question answering pipeline over form platform tables.

    States: idle -> resolving -> assembling -> prompting -> calling -> done.
    No state is revisited and no stage falls back to another table set or
    model. Runs hold no state beyond ``state``; callers must not overlap two
    runs for the same conversational turn.
    """

    def __init__(
        self,
        gateway: TableGateway,
        completion_client: CompletionClient,
        prompt_builder: Optional[PromptBuilder] = None,
        on_state_change: Optional[StateListener] = None,
    ):
        self._gateway = gateway
        self._completion = completion_client
        self._resolver = TableResolver(gateway)
        self._assembler = ContextAssembler(gateway)
        self._prompt_builder = prompt_builder or PromptBuilder()
        self._on_state_change = on_state_change
        self.state = PipelineState.IDLE

    @classmethod
    def from_settings(cls, settings: "Settings") -> "QueryPipeline":
        """Create a pipeline with HTTP clients configured from settings."""
        return cls(
            gateway=TableGateway(timeout=settings.table_api.timeout),
            completion_client=CompletionClient(
                api_base=settings.llm.api_base,
                timeout=settings.llm.timeout,
                default_model=settings.llm.default_model,
            ),
        )

    def _enter(self, state: PipelineState) -> None:
        self.state = state
        logger.debug(f"Pipeline state: {state.value}")
        if self._on_state_change is None:
            return
        try:
            self._on_state_change(state)
        except Exception:
            logger.exception(f"State listener failed on {state.value}")

    def _fail(
        self,
        stage: PipelineStage,
        error: Exception,
    ) -> PipelineErr:
        if isinstance(error, FormAssistError):
            result = PipelineErr(
                stage=stage,
                message=error.message,
                error_type=error.error_type,
                table_name=error.table_name,
            )
            logger.warning(f"Pipeline failed at {stage.value}: {error.error_type}: {error.message}")
        else:
            logger.exception(f"Unexpected error at {stage.value}")
            result = PipelineErr(
                stage=stage,
                message=f"Unexpected error: {error}",
                error_type=type(error).__name__,
            )
        self._enter(PipelineState.DONE)
        return result

    async def run(
        self,
        question: str,
        declared_refs: list[TableReference],
        session: AuthSession,
        api_key: str,
        model: str,
    ) -> PipelineResult:
        """
        Answer a question about the declared tables.

        Args:
            question: User's question; must not be blank.
            declared_refs: Tables to load, in prompt order. Empty means every table.
            session: Table API credentials for this call.
            api_key: Completion endpoint key.
            model: Completion model name.

        Returns:
            PipelineOk with the answer, or PipelineErr naming the failed stage.
        """
        self.state = PipelineState.IDLE

        if not question or not question.strip():
            return self._fail(PipelineStage.VALIDATE, ValidationError("Question must not be empty"))

        self._enter(PipelineState.RESOLVING)
        try:
            # Resolve the token once so per-table calls do not repeat it
            session = await session.authenticated()
            refs = await self._resolver.resolve(declared_refs, session)
        except Exception as e:
            return self._fail(PipelineStage.RESOLVE_TABLES, e)

        self._enter(PipelineState.ASSEMBLING)
        try:
            context = await self._assembler.assemble(refs, session)
        except FormAssistError as e:
            if e.table_name and e.table_name not in e.message:
                e.message = f"Table '{e.table_name}': {e.message}"
            return self._fail(PipelineStage.FETCH_TABLE, e)
        except Exception as e:
            return self._fail(PipelineStage.FETCH_TABLE, e)

        self._enter(PipelineState.PROMPTING)
        try:
            prompts = self._prompt_builder.build_prompts(context, question)
        except Exception as e:
            return self._fail(PipelineStage.BUILD_CONTEXT, e)

        self._enter(PipelineState.CALLING)
        try:
            completion = await self._completion.complete(
                api_key, model, prompts.system_prompt, prompts.user_prompt
            )
        except Exception as e:
            return self._fail(PipelineStage.CALL_MODEL, e)

        self._enter(PipelineState.DONE)
        logger.info(f"Answered question over {len(context.tables)} table(s)")
        return PipelineOk(answer=completion.answer, usage=completion.usage)

    async def close(self) -> None:
        await self._gateway.close()
        await self._completion.close()

    async def __aenter__(self) -> "QueryPipeline":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
