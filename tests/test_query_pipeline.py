"""
Test QueryPipeline end to end with mocked table and completion APIs.
"""

import httpx

from conftest import BASE_URL, FakeCompletionApi, FakeTableApi, orders_table, run
from formassist.gateway import TableGateway
from formassist.llm import CompletionClient
from formassist.models import (
    AuthSession,
    PipelineErr,
    PipelineOk,
    PipelineStage,
    PipelineState,
    TableReference,
)
from formassist.pipeline import QueryPipeline


def _pipeline(table_api: FakeTableApi, completion_api: FakeCompletionApi, states=None) -> QueryPipeline:
    return QueryPipeline(
        gateway=TableGateway(client=table_api.client()),
        completion_client=CompletionClient(client=completion_api.client()),
        on_state_change=states.append if states is not None else None,
    )


def _ask(pipeline: QueryPipeline, question: str, refs, session, api_key: str = "sk-test"):
    return run(pipeline.run(question, refs, session, api_key, "gpt-4o"))


def test_orders_total_end_to_end(session, orders_api) -> None:
    completion_api = FakeCompletionApi(
        httpx.Response(200, json={"choices": [{"message": {"content": "30"}}]})
    )
    states: list[PipelineState] = []
    pipeline = _pipeline(orders_api, completion_api, states)

    result = _ask(pipeline, "what is the total?", [TableReference(table_name="Orders")], session)

    assert isinstance(result, PipelineOk)
    assert result.answer == "30"
    assert result.usage is None

    user_prompt = completion_api.last_body()["messages"][1]["content"]
    assert "Row count: 2" in user_prompt
    assert '"amt": 10' in user_prompt
    assert '"amt": 20' in user_prompt
    assert "what is the total?" in user_prompt

    assert states == [
        PipelineState.RESOLVING,
        PipelineState.ASSEMBLING,
        PipelineState.PROMPTING,
        PipelineState.CALLING,
        PipelineState.DONE,
    ]
    assert pipeline.state == PipelineState.DONE


def test_unknown_table_fails_at_fetch_stage(session, orders_api) -> None:
    completion_api = FakeCompletionApi()
    pipeline = _pipeline(orders_api, completion_api)

    result = _ask(pipeline, "how many ghosts?", [TableReference(table_name="Ghosts")], session)

    assert isinstance(result, PipelineErr)
    assert result.stage == PipelineStage.FETCH_TABLE
    assert result.error_type == "NotFoundError"
    assert "Ghosts" in result.message
    assert result.table_name == "Ghosts"
    assert completion_api.requests == []


def test_blank_question_makes_no_calls(session, orders_api) -> None:
    completion_api = FakeCompletionApi()
    pipeline = _pipeline(orders_api, completion_api)

    result = _ask(pipeline, "   ", [TableReference(table_name="Orders")], session)

    assert isinstance(result, PipelineErr)
    assert result.stage == PipelineStage.VALIDATE
    assert result.error_type == "ValidationError"
    assert orders_api.requests == []
    assert completion_api.requests == []


def test_no_declared_tables_uses_every_table_by_display_name(session, orders_api) -> None:
    completion_api = FakeCompletionApi()
    pipeline = _pipeline(orders_api, completion_api)

    result = _ask(pipeline, "what is the total?", [], session)

    assert isinstance(result, PipelineOk)
    system_prompt = completion_api.last_body()["messages"][0]["content"]
    assert "Table: Customer Orders" in system_prompt
    assert orders_api.paths() == [
        "/api/v1/tables",
        "/api/v1/tables",
        "/api/v1/tables/t-1/data",
    ]


def test_listing_failure_maps_to_resolve_stage(session, orders_api) -> None:
    orders_api.fail_paths["/api/v1/tables"] = httpx.Response(503)
    pipeline = _pipeline(orders_api, FakeCompletionApi())

    result = _ask(pipeline, "what is the total?", [], session)

    assert isinstance(result, PipelineErr)
    assert result.stage == PipelineStage.RESOLVE_TABLES
    assert result.error_type == "NetworkError"


def test_missing_token_maps_to_resolve_stage(orders_api) -> None:
    pipeline = _pipeline(orders_api, FakeCompletionApi())
    session = AuthSession(base_url=BASE_URL, token_provider=lambda: "")

    result = _ask(pipeline, "what is the total?", [TableReference(table_name="Orders")], session)

    assert isinstance(result, PipelineErr)
    assert result.stage == PipelineStage.RESOLVE_TABLES
    assert result.error_type == "AuthError"
    assert orders_api.requests == []


def test_token_provider_called_once_per_run(orders_api) -> None:
    orders_api.tables.append({**orders_table("t-2"), "name": "Returns", "displayName": "Returns"})
    orders_api.rows["t-2"] = [{"amt": -5}]
    calls: list[int] = []

    async def provider() -> str:
        calls.append(1)
        return "tok-123"

    pipeline = _pipeline(orders_api, FakeCompletionApi())
    session = AuthSession(base_url=BASE_URL, token_provider=provider)
    refs = [TableReference(table_name="Orders"), TableReference(table_name="Returns")]

    result = _ask(pipeline, "net total?", refs, session)

    assert isinstance(result, PipelineOk)
    assert len(calls) == 1
    assert len(orders_api.requests) == 4


def test_fetch_failure_stops_before_later_tables(session, orders_api) -> None:
    orders_api.fail_paths["/api/v1/tables/t-1/data"] = httpx.Response(500)
    completion_api = FakeCompletionApi()
    pipeline = _pipeline(orders_api, completion_api)
    refs = [TableReference(table_name="Orders"), TableReference(table_name="Customer Orders")]

    result = _ask(pipeline, "total?", refs, session)

    assert isinstance(result, PipelineErr)
    assert result.stage == PipelineStage.FETCH_TABLE
    assert result.table_name == "Orders"
    assert "Orders" in result.message
    assert orders_api.paths() == ["/api/v1/tables", "/api/v1/tables/t-1/data"]
    assert completion_api.requests == []


def test_no_tables_available_maps_to_build_context_stage(session) -> None:
    table_api = FakeTableApi(tables=[])
    completion_api = FakeCompletionApi()
    pipeline = _pipeline(table_api, completion_api)

    result = _ask(pipeline, "anything?", [], session)

    assert isinstance(result, PipelineErr)
    assert result.stage == PipelineStage.BUILD_CONTEXT
    assert completion_api.requests == []


def test_missing_api_key_maps_to_call_model_stage(session, orders_api) -> None:
    completion_api = FakeCompletionApi()
    pipeline = _pipeline(orders_api, completion_api)

    result = _ask(pipeline, "total?", [TableReference(table_name="Orders")], session, api_key="")

    assert isinstance(result, PipelineErr)
    assert result.stage == PipelineStage.CALL_MODEL
    assert result.error_type == "ConfigError"
    assert completion_api.requests == []


def test_upstream_error_message_is_surfaced(session, orders_api) -> None:
    completion_api = FakeCompletionApi(
        httpx.Response(429, json={"error": {"message": "Rate limit reached"}})
    )
    pipeline = _pipeline(orders_api, completion_api)

    result = _ask(pipeline, "total?", [TableReference(table_name="Orders")], session)

    assert isinstance(result, PipelineErr)
    assert result.stage == PipelineStage.CALL_MODEL
    assert result.message == "Rate limit reached"
    assert result.display_text() == "[Call model] Error: Rate limit reached"


def test_answer_is_returned_verbatim(session, orders_api) -> None:
    content = "    SELECT total\n  = 30\n"
    completion_api = FakeCompletionApi(
        httpx.Response(200, json={"choices": [{"message": {"content": content}}]})
    )
    pipeline = _pipeline(orders_api, completion_api)

    result = _ask(pipeline, "what is the total?", [TableReference(table_name="Orders")], session)

    assert isinstance(result, PipelineOk)
    assert result.answer == content


def test_question_reaches_prompt_unchanged(session, orders_api) -> None:
    completion_api = FakeCompletionApi()
    pipeline = _pipeline(orders_api, completion_api)

    _ask(pipeline, "  what is the total?\n", [TableReference(table_name="Orders")], session)

    user_prompt = completion_api.last_body()["messages"][1]["content"]
    assert user_prompt.endswith("Question:   what is the total?\n")


def test_failing_state_listener_does_not_abort_run(session, orders_api) -> None:
    seen: list[PipelineState] = []

    def listener(state: PipelineState) -> None:
        seen.append(state)
        raise RuntimeError("listener failed")

    pipeline = QueryPipeline(
        gateway=TableGateway(client=orders_api.client()),
        completion_client=CompletionClient(client=FakeCompletionApi().client()),
        on_state_change=listener,
    )

    result = _ask(pipeline, "what is the total?", [TableReference(table_name="Orders")], session)

    assert isinstance(result, PipelineOk)
    assert seen[-1] == PipelineState.DONE
    assert pipeline.state == PipelineState.DONE


def test_failing_state_listener_keeps_error_result(session) -> None:
    def listener(state: PipelineState) -> None:
        raise RuntimeError("listener failed")

    pipeline = QueryPipeline(
        gateway=TableGateway(client=FakeTableApi().client()),
        completion_client=CompletionClient(client=FakeCompletionApi().client()),
        on_state_change=listener,
    )

    result = _ask(pipeline, "   ", [], session)

    assert isinstance(result, PipelineErr)
    assert result.stage == PipelineStage.VALIDATE


class ExplodingGateway:
    async def list_tables(self, session):
        raise RuntimeError("unexpected")

    async def close(self) -> None:
        pass


def test_unexpected_exception_is_returned_as_error(session) -> None:
    pipeline = QueryPipeline(
        gateway=ExplodingGateway(),
        completion_client=CompletionClient(client=FakeCompletionApi().client()),
    )

    result = run(pipeline.run("total?", [], session, "sk-test", "gpt-4o"))

    assert isinstance(result, PipelineErr)
    assert result.stage == PipelineStage.RESOLVE_TABLES
    assert result.error_type == "RuntimeError"
