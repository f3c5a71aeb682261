"""
Vector Knowledge Store
Embeds text documents into a named vector collection and answers
similarity queries with plain strings.

Failure policy:
- upsert: one bad embedding skips that document, never the batch
- search: any failure returns [] so callers can answer without context
"""

import asyncio
import uuid
from typing import List, Optional, Set

from loguru import logger

from .embeddings import EmbeddingService
from .vector_store import RedisVectorDatabase, VectorRecord


# Fixed namespace so identical text always maps to the same point id
DOCUMENT_NAMESPACE = uuid.UUID("6f1c2b9e-4d3a-5b8e-9c7f-2a1d0e3b4c5f")


def document_id(content: str) -> str:
    """Deterministic point id for a document's text"""
    return str(uuid.uuid5(DOCUMENT_NAMESPACE, content))


class VectorKnowledgeStore:
    """
    Text-in, text-out wrapper over the vector database
    
    Usage:
        store = VectorKnowledgeStore(embedder, vector_db, embedding_dim=1536)
        await store.upsert("stays_knowledge", ["Question: ... | Answer: ..."])
        context = await store.search("stays_knowledge", "Can I bring pets?")
    """
    
    def __init__(
        self,
        embedding_service: EmbeddingService,
        vector_db: RedisVectorDatabase,
        embedding_dim: int = 1536,
        metric: str = "cosine",
        embed_timeout: Optional[float] = None
    ):
        self.embeddings = embedding_service
        self.vector_db = vector_db
        self.embedding_dim = embedding_dim
        self.metric = metric
        self.embed_timeout = embed_timeout
    
    async def _embed(self, text: str) -> List[float]:
        if self.embed_timeout:
            return await asyncio.wait_for(self.embeddings.embed(text), timeout=self.embed_timeout)
        return await self.embeddings.embed(text)
    
    async def ensure_collection(
        self,
        name: str,
        dim: Optional[int] = None,
        metric: Optional[str] = None
    ) -> bool:
        """Idempotent: checks existence before creating"""
        return await self.vector_db.ensure_collection(
            name,
            dim or self.embedding_dim,
            metric or self.metric
        )
    
    async def upsert(self, name: str, documents: List[str]) -> int:
        """
        Embed and store documents
        
        Args:
            name: Collection name
            documents: Document texts
        
        Returns:
            int: Number of documents stored
        """
        if not documents:
            return 0
        
        await self.ensure_collection(name)
        
        records: List[VectorRecord] = []
        for content in documents:
            try:
                embedding = await self._embed(content)
            except Exception as e:
                logger.error(f"Embedding failed, skipping document '{content[:40]}...': {e}")
                continue
            
            records.append(VectorRecord(
                id=document_id(content),
                embedding=embedding,
                payload={"content": content}
            ))
        
        if not records:
            logger.warning(f"No documents could be embedded for '{name}'")
            return 0
        
        stored = await self.vector_db.upsert(name, records)
        if stored == 0:
            logger.error(
                f"Vector database rejected all {len(records)} embedding(s) for '{name}'; "
                f"check that EMBEDDING_DIM matches the embedding model"
            )
            return 0
        
        logger.info(f"Upserted {stored}/{len(documents)} document(s) into '{name}'")
        return stored
    
    async def replace(self, name: str, documents: List[str]) -> int:
        """
        Upsert the full generation, then prune points that are not part of it
        
        Documents that failed to embed keep their previous vector since
        their id is still part of the generation.
        
        Returns:
            int: Number of documents stored
        """
        stored = await self.upsert(name, documents)
        
        if not documents:
            logger.warning(f"Empty generation for '{name}', skipping prune")
            return stored
        
        keep_ids: Set[str] = {document_id(content) for content in documents}
        await self.vector_db.delete_except(name, keep_ids)
        return stored
    
    async def search(
        self,
        name: str,
        query: str,
        limit: int = 5,
        score_threshold: float = 0.3
    ) -> List[str]:
        """
        Similarity search returning document texts
        
        Returns:
            Matching texts, best first; [] on any failure
        """
        try:
            vector = await self._embed(query)
            hits = await self.vector_db.search(
                name,
                vector,
                limit=limit,
                score_threshold=score_threshold
            )
        except Exception as e:
            logger.error(f"Knowledge search failed: {e}")
            return []
        
        return [hit.payload.get("content", "") for hit in hits if hit.payload.get("content")]
    
    async def search_context(
        self,
        name: str,
        query: str,
        limit: int = 5,
        score_threshold: float = 0.3
    ) -> str:
        """Search results as a bullet list for prompts ("" when nothing matched)"""
        results = await self.search(name, query, limit=limit, score_threshold=score_threshold)
        return "\n".join(f"- {content}" for content in results)
