"""
Chat Providers
Two interchangeable backends:
- If OPENAI_API_KEY is set: OpenAI-compatible chat completions
- Otherwise: Ollama (local) over its HTTP API

Both expose two model profiles:
- deliberate: higher-quality model for reasoning and tool use
- reactive: faster model for copy and briefings
"""

import asyncio
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import httpx
from langchain_core.prompts import PromptTemplate
from loguru import logger
from openai import AsyncOpenAI

from ..config import settings


class ModelProfile(str, Enum):
    DELIBERATE = "deliberate"
    REACTIVE = "reactive"


@dataclass
class ToolCallRequest:
    """A function call requested by the model"""
    id: str
    name: str
    arguments: str  # JSON text as produced by the model


@dataclass
class ChatTurn:
    """One assistant reply"""
    content: str = ""
    tool_calls: List[ToolCallRequest] = field(default_factory=list)
    
    def as_message(self) -> Dict[str, Any]:
        """Assistant message to append to the conversation before tool results"""
        message: Dict[str, Any] = {"role": "assistant", "content": self.content or ""}
        if self.tool_calls:
            message["tool_calls"] = [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {"name": call.name, "arguments": call.arguments}
                }
                for call in self.tool_calls
            ]
        return message


class ChatProvider:
    """Base class for chat backends"""
    
    name: str = "base"
    
    def model_for(self, profile: ModelProfile) -> str:
        raise NotImplementedError
    
    async def chat(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        profile: ModelProfile = ModelProfile.DELIBERATE,
        temperature: float = 0.7
    ) -> ChatTurn:
        raise NotImplementedError
    
    async def complete(
        self,
        prompt: PromptTemplate,
        variables: Dict[str, Any],
        profile: ModelProfile = ModelProfile.DELIBERATE,
        temperature: float = 0.7
    ) -> str:
        """
        Render a prompt template and return the model's text
        
        Args:
            prompt: Langchain prompt template
            variables: Values for the template's input variables
            profile: Model profile to use
            temperature: Sampling temperature
        
        Returns:
            str: Raw model output ("" if the model returned nothing)
        """
        text = prompt.format(**variables)
        turn = await self.chat(
            [{"role": "user", "content": text}],
            profile=profile,
            temperature=temperature
        )
        return turn.content or ""


class OpenAIChatProvider(ChatProvider):
    """
    OpenAI chat completions (also works with OpenRouter via OPENAI_BASE_URL)
    """
    
    name = "openai"
    
    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        deliberate_model: Optional[str] = None,
        reactive_model: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        self.client = client or AsyncOpenAI(
            api_key=settings.OPENAI_API_KEY,
            base_url=settings.OPENAI_BASE_URL
        )
        self.models = {
            ModelProfile.DELIBERATE: deliberate_model or settings.DELIBERATE_MODEL,
            ModelProfile.REACTIVE: reactive_model or settings.REACTIVE_MODEL,
        }
        self.timeout = timeout or settings.LLM_TIMEOUT_SECONDS
        
        logger.info(
            f"✓ LLM Provider: OpenAI (deliberate={self.models[ModelProfile.DELIBERATE]}, "
            f"reactive={self.models[ModelProfile.REACTIVE]})"
        )
    
    def model_for(self, profile: ModelProfile) -> str:
        return self.models[ModelProfile(profile)]
    
    async def chat(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        profile: ModelProfile = ModelProfile.DELIBERATE,
        temperature: float = 0.7
    ) -> ChatTurn:
        kwargs: Dict[str, Any] = {
            "model": self.model_for(profile),
            "messages": messages,
            "temperature": temperature,
        }
        if tools:
            kwargs["tools"] = tools
            kwargs["tool_choice"] = "auto"
        
        response = await asyncio.wait_for(
            self.client.chat.completions.create(**kwargs),
            timeout=self.timeout
        )
        
        message = response.choices[0].message
        tool_calls = [
            ToolCallRequest(
                id=call.id,
                name=call.function.name,
                arguments=call.function.arguments or "{}"
            )
            for call in (message.tool_calls or [])
        ]
        return ChatTurn(content=message.content or "", tool_calls=tool_calls)


class OllamaChatProvider(ChatProvider):
    """
    Ollama chat API (local). Both profiles map to OLLAMA_MODEL unless
    overridden.
    """
    
    name = "ollama"
    
    def __init__(
        self,
        base_url: Optional[str] = None,
        deliberate_model: Optional[str] = None,
        reactive_model: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        self.base_url = (base_url or settings.OLLAMA_BASE_URL).rstrip("/")
        self.models = {
            ModelProfile.DELIBERATE: deliberate_model or settings.OLLAMA_MODEL,
            ModelProfile.REACTIVE: reactive_model or settings.OLLAMA_MODEL,
        }
        self.timeout = timeout or settings.LLM_TIMEOUT_SECONDS
        
        logger.info(f"✓ LLM Provider: Ollama ({self.models[ModelProfile.DELIBERATE]})")
    
    def model_for(self, profile: ModelProfile) -> str:
        return self.models[ModelProfile(profile)]
    
    async def chat(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        profile: ModelProfile = ModelProfile.DELIBERATE,
        temperature: float = 0.7
    ) -> ChatTurn:
        payload: Dict[str, Any] = {
            "model": self.model_for(profile),
            "messages": [self._to_ollama_message(m) for m in messages],
            "stream": False,
            "options": {"temperature": temperature}
        }
        if tools:
            payload["tools"] = tools
        
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(f"{self.base_url}/api/chat", json=payload)
                response.raise_for_status()
                result = response.json()
        except httpx.ConnectError:
            logger.error("Cannot connect to Ollama. Make sure Ollama is running.")
            raise
        
        message = result.get("message", {})
        tool_calls = []
        for index, call in enumerate(message.get("tool_calls") or []):
            function = call.get("function", {})
            arguments = function.get("arguments", {})
            tool_calls.append(ToolCallRequest(
                id=call.get("id") or f"call_{index}",
                name=function.get("name", ""),
                arguments=arguments if isinstance(arguments, str) else json.dumps(arguments)
            ))
        
        return ChatTurn(content=message.get("content", ""), tool_calls=tool_calls)
    
    @staticmethod
    def _to_ollama_message(message: Dict[str, Any]) -> Dict[str, Any]:
        # Ollama expects tool-call arguments as objects, not JSON text
        converted = {"role": message["role"], "content": message.get("content") or ""}
        if message.get("tool_calls"):
            converted["tool_calls"] = [
                {
                    "function": {
                        "name": call["function"]["name"],
                        "arguments": json.loads(call["function"]["arguments"] or "{}")
                    }
                }
                for call in message["tool_calls"]
            ]
        return converted


def create_chat_provider() -> ChatProvider:
    """OpenAI when a usable key is configured, Ollama otherwise"""
    if settings.use_openai:
        return OpenAIChatProvider()
    logger.warning("OPENAI_API_KEY not set, falling back to Ollama")
    return OllamaChatProvider()
