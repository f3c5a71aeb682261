"""
MySQL Connection Pool
Blocking mysql-connector calls run on the default executor so they never
stall the event loop.
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional, TypeVar

from loguru import logger
from mysql.connector import pooling, Error as MySQLError

from ..config import settings


T = TypeVar("T")


class MySQLDatabase:
    """
    Lazily-created connection pool with async helpers
    
    Usage:
        db = MySQLDatabase("concierge_rw")
        rows = await db.fetch_all("SELECT Id, Title FROM Listings LIMIT %(n)s", {"n": 5})
    """
    
    def __init__(
        self,
        pool_name: str,
        read_only: bool = False,
        pool_size: Optional[int] = None,
        timeout: Optional[float] = None,
        config: Optional[Dict[str, Any]] = None
    ):
        self.pool_name = pool_name
        self.read_only = read_only
        self.pool_size = pool_size or settings.DB_POOL_SIZE
        self.timeout = timeout
        self._config = config
        self._pool: Optional[pooling.MySQLConnectionPool] = None
    
    def _ensure_connected(self) -> pooling.MySQLConnectionPool:
        """Ensure the connection pool is initialized"""
        if self._pool is not None:
            return self._pool
        
        config = self._config or settings.get_mysql_config(read_only=self.read_only)
        try:
            self._pool = pooling.MySQLConnectionPool(
                pool_name=self.pool_name,
                pool_size=self.pool_size,
                **config
            )
        except MySQLError as e:
            logger.error(f"Failed to connect to MySQL ({self.pool_name}): {e}")
            raise
        
        logger.info(f"MySQL pool '{self.pool_name}' connected to {config.get('database')}")
        return self._pool
    
    def _run_sync(self, work: Callable[[Any], T]) -> T:
        conn = self._ensure_connected().get_connection()
        try:
            return work(conn)
        finally:
            conn.close()
    
    async def run(self, work: Callable[[Any], T]) -> T:
        """Run work(connection) on the executor"""
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(None, self._run_sync, work)
        if self.timeout:
            return await asyncio.wait_for(future, timeout=self.timeout)
        return await future
    
    async def fetch_all(self, query: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        def work(conn):
            cursor = conn.cursor(dictionary=True)
            try:
                cursor.execute(query, params or {})
                return cursor.fetchall()
            finally:
                cursor.close()
        
        return await self.run(work)
    
    async def fetch_one(self, query: str, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        def work(conn):
            cursor = conn.cursor(dictionary=True)
            try:
                cursor.execute(query, params or {})
                row = cursor.fetchone()
                # Drain anything left so the connection returns to the pool clean
                cursor.fetchall()
                return row
            finally:
                cursor.close()
        
        return await self.run(work)
    
    async def execute(self, query: str, params: Optional[Dict[str, Any]] = None) -> int:
        """
        Execute a write and commit
        
        Returns:
            int: Affected row count
        """
        def work(conn):
            cursor = conn.cursor()
            try:
                cursor.execute(query, params or {})
                conn.commit()
                return cursor.rowcount
            except MySQLError:
                conn.rollback()
                raise
            finally:
                cursor.close()
        
        return await self.run(work)
    
    async def health_check(self) -> bool:
        try:
            await self.fetch_one("SELECT 1 AS ok")
            return True
        except Exception as e:
            logger.warning(f"MySQL health check failed ({self.pool_name}): {e}")
            return False
