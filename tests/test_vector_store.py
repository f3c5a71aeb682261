import pytest

from concierge_ai.knowledge.vector_store import RedisVectorDatabase, VectorRecord

from conftest import FakeRedis


def record(point_id, embedding, content):
    return VectorRecord(id=point_id, embedding=embedding, payload={"content": content})


@pytest.mark.asyncio
async def test_ensure_collection_is_idempotent():
    db = RedisVectorDatabase(FakeRedis())
    
    assert await db.ensure_collection("kb", 3) is True
    assert await db.ensure_collection("kb", 3) is False
    assert await db.get_dimension("kb") == 3
    assert await db.collection_exists("kb") is True


@pytest.mark.asyncio
async def test_unsupported_metric_is_rejected():
    db = RedisVectorDatabase(FakeRedis())
    with pytest.raises(ValueError):
        await db.ensure_collection("kb", 3, metric="dot")


@pytest.mark.asyncio
async def test_search_orders_by_cosine_and_applies_threshold():
    db = RedisVectorDatabase(FakeRedis())
    await db.ensure_collection("kb", 3)
    await db.upsert("kb", [
        record("x", [1.0, 0.0, 0.0], "east"),
        record("y", [0.7, 0.7, 0.0], "north-east"),
        record("z", [-1.0, 0.0, 0.0], "west"),
    ])
    
    hits = await db.search("kb", [1.0, 0.0, 0.0], limit=5, score_threshold=0.3)
    
    assert [hit.payload["content"] for hit in hits] == ["east", "north-east"]
    assert hits[0].score == pytest.approx(1.0, abs=1e-5)


@pytest.mark.asyncio
async def test_upsert_skips_wrong_dimension():
    db = RedisVectorDatabase(FakeRedis())
    await db.ensure_collection("kb", 3)
    
    written = await db.upsert("kb", [record("a", [1.0, 0.0, 0.0], "ok"), record("b", [1.0, 0.0], "short")])
    
    assert written == 1
    assert await db.count("kb") == 1


@pytest.mark.asyncio
async def test_delete_except_removes_stale_points():
    redis = FakeRedis()
    db = RedisVectorDatabase(redis)
    await db.ensure_collection("kb", 2)
    await db.upsert("kb", [record("a", [1.0, 0.0], "a"), record("b", [0.0, 1.0], "b")])
    
    removed = await db.delete_except("kb", {"a"})
    
    assert removed == 1
    assert await db.count("kb") == 1
    assert redis.keys_matching("kb:kb:point:b") == []

