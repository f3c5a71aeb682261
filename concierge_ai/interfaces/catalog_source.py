"""
Catalog Source
Streams active listings page by page for knowledge sync
"""

from typing import Any, AsyncIterator, Dict, List

from loguru import logger

from .mysql_database import MySQLDatabase


ACTIVE_LISTINGS_PAGE_SQL = """
    SELECT l.Id, l.Title, l.Description, l.PricePerNight,
           l.City, l.Country, l.MaxGuests
    FROM Listings l
    WHERE l.Status = 0
    ORDER BY l.Id
    LIMIT %(limit)s OFFSET %(offset)s
"""


class MySQLCatalogSource:
    """Active listings (Status = 0) from the Listings table"""
    
    def __init__(self, database: MySQLDatabase):
        self.database = database
    
    async def iter_rows(self, page_size: int = 200) -> AsyncIterator[Dict[str, Any]]:
        offset = 0
        while True:
            rows = await self.database.fetch_all(
                ACTIVE_LISTINGS_PAGE_SQL,
                {"limit": page_size, "offset": offset}
            )
            for row in rows:
                yield row
            
            if len(rows) < page_size:
                break
            offset += page_size
        
        logger.debug(f"Catalog scan finished at offset {offset}")
    
    async def list_all(self, page_size: int = 200) -> List[Dict[str, Any]]:
        """All active listings in one list"""
        return [row async for row in self.iter_rows(page_size=page_size)]
