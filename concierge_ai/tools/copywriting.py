"""
Copywriting Tool
Marketing descriptions for a listing, five variants per call
"""

from typing import List

from ..llm.chat_provider import ChatProvider, ModelProfile
from ..llm.output import split_variants
from ..llm.prompts import COPYWRITING_PROMPT, DESCRIPTION_DELIMITER


class CopywritingTool:
    
    TOOL_NAME = "Copywriting"
    
    def __init__(self, chat_provider: ChatProvider):
        self.chat = chat_provider
    
    async def generate_descriptions(self, property_details: str) -> List[str]:
        raw = await self.chat.complete(
            COPYWRITING_PROMPT,
            {"property_details": property_details},
            profile=ModelProfile.REACTIVE,
            temperature=0.9
        )
        return split_variants(raw, DESCRIPTION_DELIMITER)
    
    def register(self, registry):
        registry.register(
            tool_name=self.TOOL_NAME,
            function_name="generate_descriptions",
            description="Generates catchy marketing descriptions for a rental property.",
            parameters={
                "type": "object",
                "properties": {
                    "property_details": {
                        "type": "string",
                        "description": "The full details of the property"
                    }
                },
                "required": ["property_details"]
            },
            handler=self.generate_descriptions
        )
