"""
Interfaces Package

Collaborators behind narrow contracts:
- mysql_database: Pooled MySQL access on the executor
- sql_executor: Read-only and user-scoped SQL execution
- catalog_source: Paged active listings for knowledge sync
- audit_store: Tool invocation records and sinks
- email_sender: SMTP HTML email
- travel_data: Hotels, weather and events
"""

from .audit_store import AuditSink, LogAuditSink, MySQLAuditSink, ToolInvocationRecord
from .catalog_source import MySQLCatalogSource
from .email_sender import EmailSender, SmtpEmailSender, wrap_html
from .mysql_database import MySQLDatabase
from .sql_executor import ReadOnlyQueryExecutor, ScopedWriteExecutor, inject_row_limit, is_read_only
from .travel_data import HotelSearchService, TripEnrichmentService

__all__ = [
    "AuditSink",
    "LogAuditSink",
    "MySQLAuditSink",
    "ToolInvocationRecord",
    "MySQLCatalogSource",
    "EmailSender",
    "SmtpEmailSender",
    "wrap_html",
    "MySQLDatabase",
    "ReadOnlyQueryExecutor",
    "ScopedWriteExecutor",
    "inject_row_limit",
    "is_read_only",
    "HotelSearchService",
    "TripEnrichmentService",
]
