"""
General Assistant Tool
Answers platform questions strictly from the knowledge base
"""

from typing import Optional

from ..llm.chat_provider import ChatProvider, ModelProfile
from ..llm.output import strip_code_fences
from ..llm.prompts import GENERAL_ASSISTANT_PROMPT


NO_CONTEXT = "(The knowledge base has no entries for this question.)"


class GeneralAssistantTool:
    
    TOOL_NAME = "GeneralAssistant"
    
    def __init__(
        self,
        chat_provider: ChatProvider,
        knowledge_store,
        collection: str,
        search_limit: int = 5,
        score_threshold: float = 0.3
    ):
        self.chat = chat_provider
        self.knowledge_store = knowledge_store
        self.collection = collection
        self.search_limit = search_limit
        self.score_threshold = score_threshold
    
    async def answer_general_question(self, question: str, context: Optional[str] = None) -> str:
        """
        Args:
            question: The user's question
            context: Knowledge snippets; searched when not supplied
        """
        if not context:
            context = await self.knowledge_store.search_context(
                self.collection,
                question,
                limit=self.search_limit,
                score_threshold=self.score_threshold
            )
        
        raw = await self.chat.complete(
            GENERAL_ASSISTANT_PROMPT,
            {"context": context or NO_CONTEXT, "question": question},
            profile=ModelProfile.DELIBERATE,
            temperature=0.2
        )
        return strip_code_fences(raw)
    
    def register(self, registry):
        registry.register(
            tool_name=self.TOOL_NAME,
            function_name="answer_general_question",
            description="Answers a general question using the platform's knowledge base.",
            parameters={
                "type": "object",
                "properties": {
                    "question": {"type": "string", "description": "The user's question"},
                    "context": {
                        "type": "string",
                        "description": "The relevant knowledge base context, if already known"
                    }
                },
                "required": ["question"]
            },
            handler=self.answer_general_question
        )
