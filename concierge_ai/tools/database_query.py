"""
Database Query Tool
Lets the model run SELECT queries, gated by the security policy
"""

from typing import Optional

from loguru import logger

from ..agents.security_gate import SecurityGate
from ..interfaces.sql_executor import ReadOnlyQueryExecutor


class DatabaseQueryTool:
    """execute_sql_query: read-only SQL, rejections returned as text"""
    
    TOOL_NAME = "DatabaseQuery"
    
    def __init__(self, executor: ReadOnlyQueryExecutor, security_gate: SecurityGate):
        self.executor = executor
        self.security_gate = security_gate
    
    async def execute_sql_query(self, query: str, user_id: Optional[str] = None) -> str:
        decision = self.security_gate.validate(query, user_id)
        if not decision.allowed:
            logger.info(f"[DatabaseQuery] Rejected: {decision.reason}")
            return decision.reason
        
        return await self.executor.execute(query, {})
    
    def register(self, registry):
        registry.register(
            tool_name=self.TOOL_NAME,
            function_name="execute_sql_query",
            description=(
                "Executes a MySQL SELECT query against the database to fetch data. "
                "Queries on private tables must filter by the current user's ID."
            ),
            parameters={
                "type": "object",
                "properties": {
                    "query": {"type": "string", "description": "The MySQL SELECT query to execute."},
                    "user_id": {"type": "string"}
                },
                "required": ["query"]
            },
            handler=self.execute_sql_query
        )
