"""
Concierge Agent
Knowledge-grounded chat with tool calling:
1. System prompt with caller role, hidden schema and knowledge context
2. Last 10 history messages + the question
3. Bounded tool-calling loop over the registry (deliberate profile)
4. Sanitize the final answer
"""

import json
from typing import Any, Dict, List, Optional

from loguru import logger

from ..llm.chat_provider import ChatProvider, ModelProfile, ToolCallRequest
from ..llm.prompts import (
    AUTHENTICATED_ROLE_INSTRUCTION,
    CONCIERGE_SYSTEM_PROMPT,
    GUEST_ROLE_INSTRUCTION,
    SCHEMA_FOR_AI,
    SCHEMA_LEAK_MARKERS
)
from .pipeline import ToolRegistry, to_json


SECURITY_ALERT = "Security Alert: Internal details blocked."
FALLBACK_ANSWER = "I'm sorry, I couldn't process that."

GUEST_TOOLS = ["execute_sql_query", "answer_general_question"]
AUTHENTICATED_TOOLS = ["execute_sql_query", "answer_general_question", "cancel_my_booking"]


def sanitize_answer(answer: Optional[str]) -> str:
    """Block answers that echo the hidden schema"""
    if not answer or not answer.strip():
        return FALLBACK_ANSWER
    if any(marker in answer for marker in SCHEMA_LEAK_MARKERS):
        logger.warning("Blocked an answer containing internal schema details")
        return SECURITY_ALERT
    return answer.strip()


def _message_field(message: Any, name: str) -> str:
    if isinstance(message, dict):
        return str(message.get(name) or "")
    return str(getattr(message, name, "") or "")


class ConciergeAgent:
    """
    Usage:
        agent = ConciergeAgent(chat, registry, knowledge_store, "stays_knowledge")
        answer = await agent.ask("Cancel booking 42", history, user_id="U1")
    """
    
    def __init__(
        self,
        chat_provider: ChatProvider,
        registry: ToolRegistry,
        knowledge_store,
        collection: str,
        schema: str = SCHEMA_FOR_AI,
        max_tool_rounds: int = 5,
        history_limit: int = 10,
        search_limit: int = 5,
        score_threshold: float = 0.3
    ):
        self.chat = chat_provider
        self.registry = registry
        self.knowledge_store = knowledge_store
        self.collection = collection
        self.schema = schema
        self.max_tool_rounds = max_tool_rounds
        self.history_limit = history_limit
        self.search_limit = search_limit
        self.score_threshold = score_threshold
    
    async def _build_messages(self, question: str, history: List[Any], user_id: Optional[str]) -> List[Dict[str, Any]]:
        is_guest = not user_id
        role_instruction = (
            GUEST_ROLE_INSTRUCTION if is_guest
            else AUTHENTICATED_ROLE_INSTRUCTION.format(user_id=user_id)
        )
        context = await self.knowledge_store.search_context(
            self.collection,
            question,
            limit=self.search_limit,
            score_threshold=self.score_threshold
        )
        
        system_prompt = CONCIERGE_SYSTEM_PROMPT.format(
            role_instruction=role_instruction,
            schema=self.schema,
            context=context or "(no matching knowledge base entries)",
            is_guest=is_guest,
            user_id=user_id or ""
        )
        
        messages: List[Dict[str, Any]] = [{"role": "system", "content": system_prompt}]
        for message in (history or [])[-self.history_limit:]:
            role = "user" if _message_field(message, "role").lower() == "user" else "assistant"
            messages.append({"role": role, "content": _message_field(message, "content")})
        messages.append({"role": "user", "content": question})
        return messages
    
    async def _run_tool(self, request: ToolCallRequest, allowed: List[str], user_id: Optional[str]) -> str:
        if request.name not in allowed:
            return f"Error: Tool '{request.name}' is not available."
        
        try:
            arguments = json.loads(request.arguments or "{}")
        except json.JSONDecodeError:
            return f"Error: Arguments for '{request.name}' were not valid JSON."
        if not isinstance(arguments, dict):
            return f"Error: Arguments for '{request.name}' must be an object."
        
        try:
            result = await self.registry.call(request.name, arguments, actor_id=user_id)
        except Exception as e:
            # Already recorded by the audit pipeline; the model gets to react
            logger.error(f"Tool {request.name} failed: {e}")
            return f"Error: {request.name} failed: {e}"
        
        return result if isinstance(result, str) else to_json(result)
    
    async def ask(self, question: str, history: Optional[List[Any]] = None, user_id: Optional[str] = None) -> str:
        """
        Args:
            question: The user's message
            history: Prior ChatMessages (or dicts with role/content)
            user_id: Authenticated user id, None for guests
        
        Returns:
            str: Sanitized answer
        """
        allowed = GUEST_TOOLS if not user_id else AUTHENTICATED_TOOLS
        tools = self.registry.openai_tools(include=allowed)
        
        try:
            messages = await self._build_messages(question, history or [], user_id)
            
            answer = None
            for _ in range(self.max_tool_rounds):
                turn = await self.chat.chat(messages, tools=tools, profile=ModelProfile.DELIBERATE)
                if not turn.tool_calls:
                    answer = turn.content
                    break
                
                messages.append(turn.as_message())
                for request in turn.tool_calls:
                    output = await self._run_tool(request, allowed, user_id)
                    messages.append({
                        "role": "tool",
                        "tool_call_id": request.id,
                        "content": output
                    })
            else:
                # Out of tool rounds: ask for a final answer without tools
                turn = await self.chat.chat(messages, profile=ModelProfile.DELIBERATE)
                answer = turn.content
        except Exception as e:
            logger.error(f"Concierge chat failed: {e}")
            return FALLBACK_ANSWER
        
        return sanitize_answer(answer)
