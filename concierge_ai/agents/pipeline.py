"""
Tool Invocation Pipeline
Every tool the model can call is registered explicitly and invoked
through a middleware chain. The first middleware is the audit pipeline:

1. Start timer, snapshot tool/function name and arguments
2. Run the tool
3. Snapshot the result, or mark the error and re-raise it unchanged
4. Persist the record in the background (failures only logged)
"""

import json
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from loguru import logger
from pydantic import BaseModel

from ..interfaces.audit_store import AuditSink, ToolInvocationRecord
from .background import BackgroundTaskGroup


# Parameter injected from the authenticated caller, never from the model
ACTOR_PARAM = "user_id"
DEFAULT_TOOL_NAME = "InlinePrompt"


@dataclass
class ToolCall:
    """Uniform view of one invocation, handed to every middleware"""
    tool_name: str
    function_name: str
    arguments: Dict[str, Any]
    invoke: Callable[[], Awaitable[Any]]
    actor_id: Optional[str] = None


Middleware = Callable[[ToolCall, Callable[[], Awaitable[Any]]], Awaitable[Any]]


def to_json(value: Any) -> str:
    """Best-effort JSON snapshot for audit records"""
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")
    elif isinstance(value, list) and value and isinstance(value[0], BaseModel):
        value = [item.model_dump(mode="json") for item in value]
    try:
        return json.dumps(value, default=str)
    except (TypeError, ValueError):
        return json.dumps(repr(value))


class ToolInvocationPipeline:
    """
    Observes tool calls without ever changing their outcome
    
    Usage:
        pipeline = ToolInvocationPipeline(audit_sink, BackgroundTaskGroup("audit"))
        registry = ToolRegistry(middlewares=[pipeline.invoke])
    """
    
    def __init__(self, audit_sink: AuditSink, task_group: BackgroundTaskGroup):
        self.audit_sink = audit_sink
        self.task_group = task_group
    
    async def invoke(self, call: ToolCall, next_: Callable[[], Awaitable[Any]]) -> Any:
        started = time.perf_counter()
        record = ToolInvocationRecord(
            tool_name=call.tool_name or DEFAULT_TOOL_NAME,
            function_name=call.function_name,
            arguments_json=to_json(call.arguments),
            actor_id=call.actor_id
        )
        
        try:
            result = await next_()
            record.result_json = to_json(result)
            return result
        except Exception as e:
            record.is_error = True
            record.error_message = str(e) or type(e).__name__
            raise
        finally:
            record.duration_ms = int((time.perf_counter() - started) * 1000)
            self.task_group.spawn(
                self._save(record),
                name=f"audit:{record.tool_name}.{record.function_name}"
            )
    
    async def _save(self, record: ToolInvocationRecord):
        try:
            await self.audit_sink.save(record)
        except Exception as e:
            logger.error(f"[AgentLogging Error] {record.function_name}: {e}")


@dataclass
class RegisteredTool:
    tool_name: str
    function_name: str
    description: str
    parameters: Dict[str, Any]
    handler: Callable[..., Awaitable[Any]]
    
    @property
    def properties(self) -> Dict[str, Any]:
        return self.parameters.get("properties", {})
    
    @property
    def takes_actor(self) -> bool:
        return ACTOR_PARAM in self.properties


class ToolRegistry:
    """
    Explicit registry of callable tools
    
    Usage:
        registry.register(
            tool_name="BookingManager",
            function_name="cancel_my_booking",
            description="Cancels a booking",
            parameters={"type": "object", "properties": {...}, "required": [...]},
            handler=booking_tool.cancel_booking
        )
        result = await registry.call("cancel_my_booking", {"booking_id": 42}, actor_id="U1")
    """
    
    def __init__(self, middlewares: Optional[List[Middleware]] = None):
        self.middlewares: List[Middleware] = list(middlewares or [])
        self._tools: Dict[str, RegisteredTool] = {}
    
    def register(
        self,
        tool_name: str,
        function_name: str,
        description: str,
        parameters: Dict[str, Any],
        handler: Callable[..., Awaitable[Any]]
    ):
        if function_name in self._tools:
            raise ValueError(f"Tool function already registered: {function_name}")
        
        self._tools[function_name] = RegisteredTool(
            tool_name=tool_name,
            function_name=function_name,
            description=description,
            parameters=parameters,
            handler=handler
        )
        logger.debug(f"Registered tool {tool_name}.{function_name}")
    
    def get(self, function_name: str) -> Optional[RegisteredTool]:
        return self._tools.get(function_name)
    
    @property
    def function_names(self) -> List[str]:
        return list(self._tools)
    
    def openai_tools(self, include: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        """
        OpenAI tool schema for the registered functions
        
        The actor parameter is hidden; it is always injected from the caller.
        """
        schemas = []
        for tool in self._tools.values():
            if include is not None and tool.function_name not in include:
                continue
            
            properties = {k: v for k, v in tool.properties.items() if k != ACTOR_PARAM}
            required = [name for name in tool.parameters.get("required", []) if name != ACTOR_PARAM]
            schemas.append({
                "type": "function",
                "function": {
                    "name": tool.function_name,
                    "description": tool.description,
                    "parameters": {
                        "type": "object",
                        "properties": properties,
                        "required": required
                    }
                }
            })
        return schemas
    
    async def call(
        self,
        function_name: str,
        arguments: Optional[Dict[str, Any]] = None,
        actor_id: Optional[str] = None
    ) -> Any:
        """
        Invoke a tool through the middleware chain
        
        Raises:
            KeyError: Unknown function name
        """
        tool = self._tools.get(function_name)
        if tool is None:
            raise KeyError(f"Unknown tool function: {function_name}")
        
        # Drop anything the schema does not declare
        kwargs = {k: v for k, v in (arguments or {}).items() if k in tool.properties}
        if tool.takes_actor:
            kwargs[ACTOR_PARAM] = actor_id
        
        async def invoke():
            return await tool.handler(**kwargs)
        
        call = ToolCall(
            tool_name=tool.tool_name,
            function_name=tool.function_name,
            arguments=kwargs,
            invoke=invoke,
            actor_id=actor_id
        )
        return await self._dispatch(call, 0)
    
    async def _dispatch(self, call: ToolCall, index: int) -> Any:
        if index >= len(self.middlewares):
            return await call.invoke()
        
        middleware = self.middlewares[index]
        return await middleware(call, lambda: self._dispatch(call, index + 1))
