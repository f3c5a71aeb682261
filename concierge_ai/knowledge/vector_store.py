"""
Redis Vector Database
Named collections of embeddings stored as Redis hashes.
Similarity search is brute-force cosine over the collection index,
the same approach the semantic cache uses.

Key layout per collection:
    kb:{collection}:meta          hash  {dim, metric, created_at}
    kb:{collection}:index         set   of point ids
    kb:{collection}:point:{id}    hash  {content, embedding (float32 bytes), ...payload}
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set

import numpy as np
from loguru import logger

from .embeddings import cosine_similarity


SUPPORTED_METRICS = ("cosine",)


@dataclass
class VectorRecord:
    """One stored vector: id, embedding and string payload"""
    id: str
    embedding: List[float]
    payload: Dict[str, str] = field(default_factory=dict)


@dataclass
class ScoredPoint:
    """A search hit"""
    id: str
    score: float
    payload: Dict[str, str]


def _decode(value) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


class RedisVectorDatabase:
    """
    Vector database on plain Redis hashes
    
    Usage:
        db = RedisVectorDatabase(get_redis_client())
        await db.ensure_collection("stays_knowledge", 1536)
        await db.upsert("stays_knowledge", records)
        hits = await db.search("stays_knowledge", vector, limit=5, score_threshold=0.3)
    """
    
    def __init__(self, redis_client, key_prefix: str = "kb:"):
        """
        Args:
            redis_client: redis.asyncio client (decode_responses=False)
            key_prefix: Namespace for every key this database owns
        """
        self.redis = redis_client
        self.key_prefix = key_prefix
    
    # ============================================
    # Key helpers
    # ============================================
    
    def _meta_key(self, collection: str) -> str:
        return f"{self.key_prefix}{collection}:meta"
    
    def _index_key(self, collection: str) -> str:
        return f"{self.key_prefix}{collection}:index"
    
    def _point_key(self, collection: str, point_id: str) -> str:
        return f"{self.key_prefix}{collection}:point:{point_id}"
    
    # ============================================
    # Collections
    # ============================================
    
    async def collection_exists(self, collection: str) -> bool:
        return bool(await self.redis.exists(self._meta_key(collection)))
    
    async def ensure_collection(self, collection: str, dim: int, metric: str = "cosine") -> bool:
        """
        Create the collection if it does not exist yet
        
        Returns:
            bool: True if this call created it
        """
        if metric not in SUPPORTED_METRICS:
            raise ValueError(f"Unsupported metric: {metric}")
        
        meta_key = self._meta_key(collection)
        if await self.redis.exists(meta_key):
            return False
        
        # HSETNX lets concurrent first-time initializers race safely
        created = await self.redis.hsetnx(meta_key, "dim", str(dim))
        if created:
            await self.redis.hset(
                meta_key,
                mapping={
                    "metric": metric,
                    "created_at": datetime.now().isoformat()
                }
            )
            logger.info(f"Created vector collection '{collection}' ({dim} dims, {metric})")
        return bool(created)
    
    async def get_dimension(self, collection: str) -> Optional[int]:
        raw = await self.redis.hget(self._meta_key(collection), "dim")
        return int(raw) if raw is not None else None
    
    async def count(self, collection: str) -> int:
        return int(await self.redis.scard(self._index_key(collection)))
    
    # ============================================
    # Points
    # ============================================
    
    async def upsert(self, collection: str, records: Iterable[VectorRecord]) -> int:
        """
        Insert or overwrite points
        
        Returns:
            int: Number of points written
        """
        dim = await self.get_dimension(collection)
        index_key = self._index_key(collection)
        
        pipe = self.redis.pipeline()
        written = 0
        for record in records:
            if dim is not None and len(record.embedding) != dim:
                logger.warning(
                    f"Skipping point {record.id}: {len(record.embedding)} dims, "
                    f"collection '{collection}' expects {dim}"
                )
                continue
            
            mapping = {k: v for k, v in record.payload.items()}
            mapping["embedding"] = np.array(record.embedding, dtype=np.float32).tobytes()
            pipe.hset(self._point_key(collection, record.id), mapping=mapping)
            pipe.sadd(index_key, record.id)
            written += 1
        
        if written:
            await pipe.execute()
        
        logger.debug(f"Upserted {written} point(s) into '{collection}'")
        return written
    
    async def search(
        self,
        collection: str,
        vector: List[float],
        limit: int = 5,
        score_threshold: float = 0.0
    ) -> List[ScoredPoint]:
        """
        Brute-force cosine search
        
        Args:
            collection: Collection name
            vector: Query embedding
            limit: Maximum hits returned
            score_threshold: Minimum similarity for a hit
        
        Returns:
            Hits ordered by descending score
        """
        index_key = self._index_key(collection)
        point_ids = await self.redis.smembers(index_key)
        
        if not point_ids:
            return []
        
        hits: List[ScoredPoint] = []
        for raw_id in point_ids:
            point_id = _decode(raw_id)
            data = await self.redis.hgetall(self._point_key(collection, point_id))
            
            if not data:
                # Point deleted underneath the index
                await self.redis.srem(index_key, raw_id)
                continue
            
            embedding_bytes = data.get(b"embedding")
            if not embedding_bytes:
                continue
            
            stored = np.frombuffer(embedding_bytes, dtype=np.float32).tolist()
            score = cosine_similarity(vector, stored)
            
            if score >= score_threshold:
                payload = {
                    _decode(k): _decode(v)
                    for k, v in data.items()
                    if k != b"embedding"
                }
                hits.append(ScoredPoint(id=point_id, score=score, payload=payload))
        
        hits.sort(key=lambda hit: hit.score, reverse=True)
        return hits[:limit]
    
    async def delete_except(self, collection: str, keep_ids: Set[str]) -> int:
        """
        Remove every point whose id is not in keep_ids
        
        Returns:
            int: Number of points removed
        """
        index_key = self._index_key(collection)
        existing = {_decode(raw) for raw in await self.redis.smembers(index_key)}
        stale = existing - set(keep_ids)
        
        if not stale:
            return 0
        
        pipe = self.redis.pipeline()
        for point_id in stale:
            pipe.delete(self._point_key(collection, point_id))
            pipe.srem(index_key, point_id)
        await pipe.execute()
        
        logger.info(f"Pruned {len(stale)} stale point(s) from '{collection}'")
        return len(stale)
