"""
Knowledge Sources
Produces KnowledgeDocuments for a sync pass from:
- the static rules file (knowledge.json FAQ entries, optional)
- the live listing catalog (paged)
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from loguru import logger


POLICY_SOURCE = "policy"
CATALOG_SOURCE = "catalog"


@dataclass
class KnowledgeDocument:
    """Text eligible for embedding plus the source it came from"""
    content: str
    source: str


def _lower_keys(item: Dict[str, Any]) -> Dict[str, Any]:
    return {str(k).lower(): v for k, v in item.items()}


class KnowledgeRulesFile:
    """
    Static FAQ file: a JSON array of {id, question, answer}
    
    A missing file yields no documents. A malformed file raises.
    """
    
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
    
    def exists(self) -> bool:
        return self.path.is_file()
    
    def read_documents(self) -> List[KnowledgeDocument]:
        if not self.exists():
            logger.info(f"Knowledge rules file not found at {self.path}, skipping")
            return []
        
        items = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(items, list):
            raise ValueError(f"{self.path} must contain a JSON array")
        
        documents = []
        for raw in items:
            if not isinstance(raw, dict):
                continue
            item = _lower_keys(raw)
            question = str(item.get("question") or "").strip()
            answer = str(item.get("answer") or "").strip()
            if not question or not answer:
                logger.debug(f"Skipping incomplete FAQ entry: {item.get('id')}")
                continue
            documents.append(KnowledgeDocument(
                content=f"Question: {question} | Answer: {answer}",
                source=POLICY_SOURCE
            ))
        
        logger.debug(f"Read {len(documents)} FAQ entries from {self.path}")
        return documents


def _format_price(value: Any) -> str:
    try:
        return f"${float(value):.2f}"
    except (TypeError, ValueError):
        return "price on request"


def listing_document(row: Dict[str, Any]) -> Optional[KnowledgeDocument]:
    """
    Render one catalog row as a document
    
    Example:
        "Listing #12: Sea View Loft in Alexandria, Egypt. $85.00/night,
         up to 4 guests. Bright loft two minutes from the corniche."
    """
    item = _lower_keys(row)
    title = str(item.get("title") or "").strip()
    if not title:
        return None
    
    location = ", ".join(
        str(part).strip() for part in (item.get("city"), item.get("country")) if part
    )
    text = f"Listing #{item.get('id')}: {title}"
    if location:
        text += f" in {location}"
    text += f". {_format_price(item.get('pricepernight'))}/night"
    
    guests = item.get("maxguests")
    if guests:
        text += f", up to {guests} guests"
    text += "."
    
    description = str(item.get("description") or "").strip()
    if description:
        text += f" {description}"
    
    return KnowledgeDocument(content=text, source=CATALOG_SOURCE)


async def read_catalog_documents(catalog_source, page_size: int = 200) -> List[KnowledgeDocument]:
    """Stream the catalog page by page into documents"""
    documents = []
    async for row in catalog_source.iter_rows(page_size=page_size):
        document = listing_document(row)
        if document is not None:
            documents.append(document)
    
    logger.debug(f"Read {len(documents)} catalog documents")
    return documents
