"""
SQL Executors
Guarded entry points for model-driven SQL:
- ReadOnlyQueryExecutor: SELECTs written by the model, results as JSON text
- ScopedWriteExecutor: parameterized writes bound to the acting user
"""

import json
import re
from typing import Any, Dict, Optional

from loguru import logger
from mysql.connector import Error as MySQLError

from .mysql_database import MySQLDatabase


READ_ONLY_VIOLATION = "Error: Security Violation. You are in Read-Only mode."
NO_DATA = "No data found."

FORBIDDEN_READ_KEYWORDS = (
    "INSERT", "UPDATE", "DELETE", "DROP", "ALTER", "TRUNCATE",
    "GRANT", "EXEC", "MERGE", "CREATE"
)
FORBIDDEN_WRITE_KEYWORDS = ("DROP", "TRUNCATE", "ALTER")

# Whole words only, so column names like CreatedAt do not trip the guard
_FORBIDDEN_READ_PATTERN = re.compile(
    r"\b(" + "|".join(FORBIDDEN_READ_KEYWORDS) + r")\b",
    re.IGNORECASE
)
_FORBIDDEN_WRITE_PATTERN = re.compile(
    r"\b(" + "|".join(FORBIDDEN_WRITE_KEYWORDS) + r")\b",
    re.IGNORECASE
)
_LIMIT_PATTERN = re.compile(r"\bLIMIT\s+\d+", re.IGNORECASE)
_COUNT_PATTERN = re.compile(r"\bCOUNT\s*\(", re.IGNORECASE)

USER_ID_PARAM = "%(user_id)s"


def is_read_only(query: str) -> bool:
    return _FORBIDDEN_READ_PATTERN.search(query) is None


def inject_row_limit(query: str, limit: int) -> str:
    """
    Append LIMIT n unless the query already limits or counts
    
    Example:
        >>> inject_row_limit("SELECT * FROM Listings;", 20)
        'SELECT * FROM Listings LIMIT 20'
    """
    stripped = query.strip().rstrip(";").strip()
    if _LIMIT_PATTERN.search(stripped) or _COUNT_PATTERN.search(stripped):
        return stripped
    return f"{stripped} LIMIT {limit}"


class ReadOnlyQueryExecutor:
    """
    Executes model-authored SELECT queries
    
    Never raises for bad SQL: every outcome is text the model can read.
    """
    
    def __init__(self, database: MySQLDatabase, row_limit: int = 20):
        self.database = database
        self.row_limit = row_limit
    
    async def execute(self, query: str, params: Optional[Dict[str, Any]] = None) -> str:
        """
        Args:
            query: SQL text
            params: Named parameters (pyformat)
        
        Returns:
            str: JSON array of rows, "No data found." or an error message
        """
        if not is_read_only(query):
            logger.warning(f"AI attempted forbidden query: {query}")
            return READ_ONLY_VIOLATION
        
        limited = inject_row_limit(query, self.row_limit)
        
        try:
            rows = await self.database.fetch_all(limited, params or {})
        except MySQLError as e:
            logger.warning(f"SQL Error for AI query: {e}")
            return f"SQL Error: {e}"
        
        if not rows:
            return NO_DATA
        
        # Dates and decimals go out as strings
        return json.dumps(rows, default=str)


class ScopedWriteExecutor:
    """
    Executes parameterized writes on behalf of one user
    
    The statement must bind %(user_id)s, which is always set to the acting
    user, so the row filter re-verifies ownership in the database.
    """
    
    def __init__(self, database: MySQLDatabase):
        self.database = database
    
    async def execute(self, sql: str, params: Optional[Dict[str, Any]], actor_id: Optional[str]) -> bool:
        """
        Returns:
            bool: True if at least one row changed
        
        Raises:
            PermissionError: If no actor id is given
        """
        if not actor_id or not str(actor_id).strip():
            raise PermissionError("Cannot perform write operations without a User ID.")
        
        if _FORBIDDEN_WRITE_PATTERN.search(sql):
            logger.warning(f"AI attempted destructive command: {sql}")
            return False
        
        if USER_ID_PARAM not in sql:
            logger.warning(f"Write rejected, statement is not scoped to the user: {sql}")
            return False
        
        bound = dict(params or {})
        bound["user_id"] = actor_id
        
        try:
            rows = await self.database.execute(sql, bound)
        except MySQLError as e:
            logger.error(f"Write execution failed: {e}")
            return False
        
        return rows > 0
