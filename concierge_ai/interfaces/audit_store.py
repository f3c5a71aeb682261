"""
Tool Invocation Audit Store
Persists one record per tool call for observability
"""

import uuid
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Optional

from loguru import logger

from .mysql_database import MySQLDatabase


@dataclass
class ToolInvocationRecord:
    """One tool call: who, what, with which arguments, how it went"""
    tool_name: str
    function_name: str
    arguments_json: str = "{}"
    result_json: Optional[str] = None
    actor_id: Optional[str] = None
    is_error: bool = False
    error_message: Optional[str] = None
    duration_ms: int = 0
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    
    def to_dict(self) -> dict:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data


class AuditSink:
    """Base class: ``save(record)``"""
    
    async def save(self, record: ToolInvocationRecord):
        raise NotImplementedError


class LogAuditSink(AuditSink):
    """Writes records to the log only (no database configured)"""
    
    async def save(self, record: ToolInvocationRecord):
        status = "ERROR" if record.is_error else "OK"
        logger.info(
            f"[Audit] {record.tool_name}.{record.function_name} {status} "
            f"{record.duration_ms}ms actor={record.actor_id or '-'}"
        )


CREATE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS AgentExecutionLogs (
        Id VARCHAR(36) PRIMARY KEY,
        UserId VARCHAR(450) NULL,
        PluginName VARCHAR(200) NOT NULL,
        FunctionName VARCHAR(200) NOT NULL,
        ArgumentsJson LONGTEXT,
        ResultJson LONGTEXT,
        IsError BOOLEAN NOT NULL DEFAULT FALSE,
        ErrorMessage TEXT NULL,
        ExecutionDurationMs BIGINT NOT NULL,
        Timestamp DATETIME(6) NOT NULL
    )
"""

INSERT_SQL = """
    INSERT INTO AgentExecutionLogs
        (Id, UserId, PluginName, FunctionName, ArgumentsJson, ResultJson,
         IsError, ErrorMessage, ExecutionDurationMs, Timestamp)
    VALUES
        (%(id)s, %(actor_id)s, %(tool_name)s, %(function_name)s, %(arguments_json)s,
         %(result_json)s, %(is_error)s, %(error_message)s, %(duration_ms)s, %(timestamp)s)
"""


class MySQLAuditSink(AuditSink):
    """Stores records in the AgentExecutionLogs table"""
    
    def __init__(self, database: MySQLDatabase):
        self.database = database
    
    async def ensure_table(self):
        await self.database.execute(CREATE_TABLE_SQL)
        logger.info("AgentExecutionLogs table ready")
    
    async def save(self, record: ToolInvocationRecord):
        params = asdict(record)
        # MySQL DATETIME has no timezone
        params["timestamp"] = record.timestamp.replace(tzinfo=None)
        await self.database.execute(INSERT_SQL, params)
        logger.debug(f"Audit record saved: {record.tool_name}.{record.function_name}")
