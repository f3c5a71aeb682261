"""
Guest Communication Tool
Sends the HTML trip briefing. The sender adds the page layout.
"""

from ..interfaces.email_sender import EmailSender


class GuestCommunicationTool:
    
    TOOL_NAME = "GuestCommunication"
    
    def __init__(self, email_sender: EmailSender):
        self.email_sender = email_sender
    
    async def send_trip_briefing_email(self, email: str, subject: str, body_content: str) -> str:
        sent = await self.email_sender.send(email, subject, body_content)
        return f"Email sent to {email}." if sent else f"Failed to send email to {email}."
    
    def register(self, registry):
        registry.register(
            tool_name=self.TOOL_NAME,
            function_name="send_trip_briefing_email",
            description="Sends the finalized HTML trip briefing to the guest.",
            parameters={
                "type": "object",
                "properties": {
                    "email": {"type": "string", "description": "The guest's email address"},
                    "subject": {"type": "string", "description": "The subject line"},
                    "body_content": {
                        "type": "string",
                        "description": (
                            "The HTML body content (paragraphs, lists). DO NOT include "
                            "<html> or <body> tags, just the inner content."
                        )
                    }
                },
                "required": ["email", "subject", "body_content"]
            },
            handler=self.send_trip_briefing_email
        )
