"""
Shared fakes for the concierge tests. Nothing here touches the network,
Redis, MySQL or a real model.
"""

import asyncio
import fnmatch
import hashlib
from typing import Any, Dict, List, Optional

import pytest

from concierge_ai.interfaces.audit_store import AuditSink
from concierge_ai.interfaces.email_sender import EmailSender
from concierge_ai.knowledge.embeddings import EmbeddingService, cosine_similarity
from concierge_ai.knowledge.vector_store import ScoredPoint
from concierge_ai.llm.chat_provider import ChatProvider, ChatTurn, ModelProfile


class FakeEmbeddingService(EmbeddingService):
    """Deterministic 8-dim vectors derived from the text hash"""
    
    model = "fake-embed"
    embedding_dim = 8
    
    def __init__(self, fail_on: Optional[List[str]] = None, delay: float = 0.0):
        self.fail_on = set(fail_on or [])
        self.delay = delay
        self.calls: List[str] = []
    
    async def embed(self, text: str) -> List[float]:
        self.calls.append(text)
        if self.delay:
            await asyncio.sleep(self.delay)
        if text in self.fail_on:
            raise RuntimeError(f"embedding failed for {text}")
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        return [b / 255.0 + 0.01 for b in digest[:8]]


class FakeVectorDatabase:
    """In-memory stand-in for RedisVectorDatabase"""
    
    def __init__(self, fail_search: bool = False):
        self.collections: Dict[str, Dict[str, Any]] = {}
        self.upsert_calls = 0
        self.ensure_calls = 0
        self.fail_search = fail_search
    
    async def ensure_collection(self, collection: str, dim: int, metric: str = "cosine") -> bool:
        self.ensure_calls += 1
        if collection in self.collections:
            return False
        self.collections[collection] = {"dim": dim, "points": {}}
        return True
    
    async def upsert(self, collection: str, records) -> int:
        self.upsert_calls += 1
        points = self.collections[collection]["points"]
        count = 0
        for record in records:
            points[record.id] = record
            count += 1
        return count
    
    async def search(self, collection, vector, limit=5, score_threshold=0.0):
        if self.fail_search:
            raise ConnectionError("vector db down")
        points = self.collections.get(collection, {}).get("points", {})
        hits = []
        for record in points.values():
            score = cosine_similarity(vector, record.embedding)
            if score >= score_threshold:
                hits.append(ScoredPoint(id=record.id, score=score, payload=dict(record.payload)))
        hits.sort(key=lambda hit: hit.score, reverse=True)
        return hits[:limit]
    
    async def delete_except(self, collection: str, keep_ids) -> int:
        points = self.collections.get(collection, {}).get("points", {})
        stale = [point_id for point_id in points if point_id not in keep_ids]
        for point_id in stale:
            del points[point_id]
        return len(stale)
    
    def contents(self, collection: str) -> List[str]:
        points = self.collections.get(collection, {}).get("points", {})
        return sorted(record.payload["content"] for record in points.values())


class FakeRedisPipeline:
    def __init__(self, redis):
        self.redis = redis
        self.ops = []
    
    def hset(self, key, mapping=None):
        self.ops.append(("hset", key, mapping))
    
    def sadd(self, key, *members):
        self.ops.append(("sadd", key, members))
    
    def srem(self, key, *members):
        self.ops.append(("srem", key, members))
    
    def delete(self, *keys):
        self.ops.append(("delete", keys))
    
    async def execute(self):
        results = []
        for op in self.ops:
            name, args = op[0], op[1:]
            if name == "delete":
                results.append(await self.redis.delete(*args[0]))
            elif name == "hset":
                results.append(await self.redis.hset(args[0], mapping=args[1]))
            else:
                results.append(await getattr(self.redis, name)(args[0], *args[1]))
        self.ops = []
        return results


def _b(value) -> bytes:
    if isinstance(value, bytes):
        return value
    return str(value).encode("utf-8")


class FakeRedis:
    """The subset of redis.asyncio used by RedisVectorDatabase (bytes in, bytes out)"""
    
    def __init__(self):
        self.hashes: Dict[bytes, Dict[bytes, bytes]] = {}
        self.sets: Dict[bytes, set] = {}
    
    async def exists(self, *keys) -> int:
        return sum(1 for key in keys if _b(key) in self.hashes or _b(key) in self.sets)
    
    async def hsetnx(self, key, field, value) -> int:
        bucket = self.hashes.setdefault(_b(key), {})
        if _b(field) in bucket:
            return 0
        bucket[_b(field)] = _b(value)
        return 1
    
    async def hset(self, key, mapping=None) -> int:
        bucket = self.hashes.setdefault(_b(key), {})
        for field, value in (mapping or {}).items():
            bucket[_b(field)] = _b(value)
        return len(mapping or {})
    
    async def hget(self, key, field):
        return self.hashes.get(_b(key), {}).get(_b(field))
    
    async def hgetall(self, key):
        return dict(self.hashes.get(_b(key), {}))
    
    async def sadd(self, key, *members) -> int:
        bucket = self.sets.setdefault(_b(key), set())
        before = len(bucket)
        bucket.update(_b(m) for m in members)
        return len(bucket) - before
    
    async def srem(self, key, *members) -> int:
        bucket = self.sets.get(_b(key), set())
        removed = 0
        for member in members:
            if _b(member) in bucket:
                bucket.discard(_b(member))
                removed += 1
        return removed
    
    async def smembers(self, key):
        return set(self.sets.get(_b(key), set()))
    
    async def scard(self, key) -> int:
        return len(self.sets.get(_b(key), set()))
    
    async def delete(self, *keys) -> int:
        removed = 0
        for key in keys:
            if self.hashes.pop(_b(key), None) is not None:
                removed += 1
            if self.sets.pop(_b(key), None) is not None:
                removed += 1
        return removed
    
    def pipeline(self):
        return FakeRedisPipeline(self)
    
    def keys_matching(self, pattern: str) -> List[str]:
        keys = [k.decode() for k in list(self.hashes) + list(self.sets)]
        return [k for k in keys if fnmatch.fnmatch(k, pattern)]


class FakeAuditSink(AuditSink):
    def __init__(self, fail: bool = False):
        self.records = []
        self.fail = fail
    
    async def save(self, record):
        self.records.append(record)
        if self.fail:
            raise ConnectionError("audit database unavailable")


class FakeEmailSender(EmailSender):
    def __init__(self, result: bool = True, raises: Optional[Exception] = None):
        self.result = result
        self.raises = raises
        self.sent = []
    
    async def send(self, to: str, subject: str, html_body: str) -> bool:
        self.sent.append({"to": to, "subject": subject, "html_body": html_body})
        if self.raises is not None:
            raise self.raises
        return self.result


class FakeChatProvider(ChatProvider):
    """Replays queued replies; strings become plain text turns"""
    
    name = "fake"
    
    def __init__(self, replies: Optional[List[Any]] = None, raises: Optional[Exception] = None):
        self.replies = list(replies or [])
        self.raises = raises
        self.requests: List[Dict[str, Any]] = []
    
    def model_for(self, profile: ModelProfile) -> str:
        return f"fake-{ModelProfile(profile).value}"
    
    async def chat(self, messages, tools=None, profile=ModelProfile.DELIBERATE, temperature=0.7) -> ChatTurn:
        self.requests.append({
            "messages": [dict(m) for m in messages],
            "tools": tools,
            "profile": profile
        })
        if self.raises is not None:
            raise self.raises
        reply = self.replies.pop(0) if self.replies else ""
        if isinstance(reply, ChatTurn):
            return reply
        return ChatTurn(content=reply)


class FakeReader:
    """ReadOnlyQueryExecutor stand-in returning a canned string"""
    
    def __init__(self, response: str = "No data found."):
        self.response = response
        self.calls = []
    
    async def execute(self, query: str, params=None) -> str:
        self.calls.append((query, dict(params or {})))
        return self.response


class FakeWriter:
    """ScopedWriteExecutor stand-in"""
    
    def __init__(self, result: bool = True):
        self.result = result
        self.calls = []
    
    async def execute(self, sql: str, params, actor_id) -> bool:
        self.calls.append((sql, dict(params or {}), actor_id))
        return self.result


@pytest.fixture
def embedder():
    return FakeEmbeddingService()


@pytest.fixture
def vector_db():
    return FakeVectorDatabase()


@pytest.fixture
def audit_sink():
    return FakeAuditSink()


@pytest.fixture
def email_sender():
    return FakeEmailSender()
