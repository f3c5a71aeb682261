import asyncio
import json

import pytest

from concierge_ai.agents.background import BackgroundTaskGroup
from concierge_ai.agents.pipeline import ToolInvocationPipeline, ToolRegistry

from conftest import FakeAuditSink


def make_registry(sink):
    tasks = BackgroundTaskGroup("audit-test")
    pipeline = ToolInvocationPipeline(sink, tasks)
    return ToolRegistry(middlewares=[pipeline.invoke]), tasks


def echo_schema(*names, actor=False):
    properties = {name: {"type": "string"} for name in names}
    if actor:
        properties["user_id"] = {"type": "string"}
    return {"type": "object", "properties": properties, "required": list(names)}


@pytest.mark.asyncio
async def test_failed_tool_records_one_error_and_reraises():
    sink = FakeAuditSink()
    registry, tasks = make_registry(sink)
    
    async def explode(text):
        raise ValueError("model asked for nonsense")
    
    registry.register("Demo", "explode", "always fails", echo_schema("text"), explode)
    
    with pytest.raises(ValueError, match="model asked for nonsense"):
        await registry.call("explode", {"text": "hi"})
    
    await tasks.join()
    
    assert len(sink.records) == 1
    record = sink.records[0]
    assert record.is_error is True
    assert record.error_message == "model asked for nonsense"
    assert record.tool_name == "Demo"
    assert record.function_name == "explode"
    assert json.loads(record.arguments_json) == {"text": "hi"}


@pytest.mark.asyncio
async def test_successful_tool_records_result():
    sink = FakeAuditSink()
    registry, tasks = make_registry(sink)
    
    async def shout(text):
        return text.upper()
    
    registry.register("Demo", "shout", "upper-cases", echo_schema("text"), shout)
    
    assert await registry.call("shout", {"text": "hello"}) == "HELLO"
    await tasks.join()
    
    assert len(sink.records) == 1
    assert sink.records[0].is_error is False
    assert json.loads(sink.records[0].result_json) == "HELLO"
    assert sink.records[0].duration_ms >= 0


@pytest.mark.asyncio
async def test_audit_failure_never_reaches_caller():
    sink = FakeAuditSink(fail=True)
    registry, tasks = make_registry(sink)
    
    async def ok():
        return "fine"
    
    registry.register("Demo", "ok", "works", echo_schema(), ok)
    
    assert await registry.call("ok") == "fine"
    await tasks.join()
    assert len(sink.records) == 1


@pytest.mark.asyncio
async def test_slow_audit_does_not_block_the_call():
    release = asyncio.Event()
    
    class SlowSink(FakeAuditSink):
        async def save(self, record):
            await release.wait()
            await super().save(record)
    
    sink = SlowSink()
    registry, tasks = make_registry(sink)
    
    async def ok():
        return 1
    
    registry.register("Demo", "ok", "works", echo_schema(), ok)
    
    assert await registry.call("ok") == 1
    assert sink.records == []
    assert tasks.pending == 1
    
    release.set()
    await tasks.join()
    assert len(sink.records) == 1


@pytest.mark.asyncio
async def test_actor_is_injected_and_hidden_from_model():
    sink = FakeAuditSink()
    registry, tasks = make_registry(sink)
    seen = {}
    
    async def whoami(note, user_id=None):
        seen["user_id"] = user_id
        return user_id
    
    registry.register("Demo", "whoami", "returns caller", echo_schema("note", actor=True), whoami)
    
    # A model-supplied user_id is overwritten by the authenticated actor
    result = await registry.call("whoami", {"note": "x", "user_id": "attacker"}, actor_id="U1")
    await tasks.join()
    
    assert result == "U1"
    assert seen["user_id"] == "U1"
    assert sink.records[0].actor_id == "U1"
    
    schema = registry.openai_tools()[0]["function"]["parameters"]
    assert "user_id" not in schema["properties"]
    assert "user_id" not in schema["required"]


@pytest.mark.asyncio
async def test_undeclared_arguments_are_dropped():
    registry, tasks = make_registry(FakeAuditSink())
    
    async def strict(text):
        return text
    
    registry.register("Demo", "strict", "one arg", echo_schema("text"), strict)
    
    assert await registry.call("strict", {"text": "a", "extra": "ignored"}) == "a"
    await tasks.join()


@pytest.mark.asyncio
async def test_unknown_tool_raises_key_error():
    registry, _ = make_registry(FakeAuditSink())
    with pytest.raises(KeyError):
        await registry.call("nope")


def test_duplicate_registration_is_rejected():
    registry = ToolRegistry()
    
    async def handler():
        return None
    
    registry.register("Demo", "dup", "", echo_schema(), handler)
    with pytest.raises(ValueError):
        registry.register("Demo", "dup", "", echo_schema(), handler)


@pytest.mark.asyncio
async def test_middlewares_run_in_order_around_the_call():
    order = []
    
    async def outer(call, next_):
        order.append("outer-before")
        result = await next_()
        order.append("outer-after")
        return result
    
    async def inner(call, next_):
        order.append(f"inner:{call.function_name}")
        return await next_()
    
    async def target():
        order.append("target")
        return "done"
    
    registry = ToolRegistry(middlewares=[outer, inner])
    registry.register("Demo", "target", "", echo_schema(), target)
    
    assert await registry.call("target") == "done"
    assert order == ["outer-before", "inner:target", "target", "outer-after"]
