import pytest
from loguru import logger

from concierge_ai.knowledge.knowledge_store import VectorKnowledgeStore, document_id
from concierge_ai.knowledge.vector_store import RedisVectorDatabase

from conftest import FakeEmbeddingService, FakeRedis, FakeVectorDatabase


COLLECTION = "kb_test"


def make_store(embedder=None, vector_db=None):
    embedder = embedder or FakeEmbeddingService()
    vector_db = vector_db or FakeVectorDatabase()
    return VectorKnowledgeStore(embedder, vector_db, embedding_dim=8), embedder, vector_db


@pytest.mark.asyncio
async def test_upsert_empty_makes_no_calls():
    store, embedder, vector_db = make_store()
    
    assert await store.upsert(COLLECTION, []) == 0
    assert embedder.calls == []
    assert vector_db.upsert_calls == 0
    assert vector_db.ensure_calls == 0


@pytest.mark.asyncio
async def test_one_failed_embedding_skips_only_that_document():
    embedder = FakeEmbeddingService(fail_on=["bad doc"])
    store, _, vector_db = make_store(embedder=embedder)
    
    stored = await store.upsert(COLLECTION, ["good one", "bad doc", "good two"])
    
    assert stored == 2
    assert len(embedder.calls) == 3
    assert vector_db.contents(COLLECTION) == ["good one", "good two"]


@pytest.mark.asyncio
async def test_reupserting_same_text_does_not_duplicate():
    store, _, vector_db = make_store()
    
    await store.upsert(COLLECTION, ["Question: pets? | Answer: no"])
    await store.upsert(COLLECTION, ["Question: pets? | Answer: no"])
    
    assert vector_db.contents(COLLECTION) == ["Question: pets? | Answer: no"]


def test_document_id_is_deterministic():
    assert document_id("same text") == document_id("same text")
    assert document_id("same text") != document_id("other text")


@pytest.mark.asyncio
async def test_replace_prunes_previous_generation():
    store, _, vector_db = make_store()
    
    await store.replace(COLLECTION, ["old listing", "kept rule"])
    await store.replace(COLLECTION, ["kept rule", "new listing"])
    
    assert vector_db.contents(COLLECTION) == ["kept rule", "new listing"]


@pytest.mark.asyncio
async def test_replace_keeps_previous_vector_when_embedding_now_fails():
    embedder = FakeEmbeddingService()
    store, _, vector_db = make_store(embedder=embedder)
    await store.replace(COLLECTION, ["flaky doc", "stable doc"])
    
    embedder.fail_on.add("flaky doc")
    await store.replace(COLLECTION, ["flaky doc", "stable doc"])
    
    assert vector_db.contents(COLLECTION) == ["flaky doc", "stable doc"]


@pytest.mark.asyncio
async def test_replace_with_empty_generation_does_not_wipe_collection():
    store, _, vector_db = make_store()
    await store.replace(COLLECTION, ["only doc"])
    
    await store.replace(COLLECTION, [])
    
    assert vector_db.contents(COLLECTION) == ["only doc"]


@pytest.mark.asyncio
async def test_search_returns_best_match_first():
    store, _, _ = make_store()
    await store.upsert(COLLECTION, ["alpha", "beta", "gamma"])
    
    results = await store.search(COLLECTION, "beta", limit=3, score_threshold=0.0)
    
    assert results[0] == "beta"
    assert set(results) == {"alpha", "beta", "gamma"}


@pytest.mark.asyncio
async def test_search_respects_limit():
    store, _, _ = make_store()
    await store.upsert(COLLECTION, ["a", "b", "c", "d"])
    
    assert len(await store.search(COLLECTION, "a", limit=2, score_threshold=0.0)) == 2


@pytest.mark.asyncio
async def test_search_returns_empty_when_embedding_fails():
    embedder = FakeEmbeddingService(fail_on=["broken query"])
    store, _, _ = make_store(embedder=embedder)
    await store.upsert(COLLECTION, ["doc"])
    
    assert await store.search(COLLECTION, "broken query") == []


@pytest.mark.asyncio
async def test_search_returns_empty_when_database_fails():
    store, _, _ = make_store(vector_db=FakeVectorDatabase(fail_search=True))
    
    assert await store.search(COLLECTION, "anything") == []


@pytest.mark.asyncio
async def test_search_context_formats_bullets():
    store, _, _ = make_store()
    await store.upsert(COLLECTION, ["Check-in is at 3 PM"])
    
    context = await store.search_context(COLLECTION, "Check-in is at 3 PM", score_threshold=0.9)
    
    assert context == "- Check-in is at 3 PM"


@pytest.mark.asyncio
async def test_dimension_mismatch_is_reported_as_error():
    vector_db = RedisVectorDatabase(FakeRedis())
    store, _, _ = make_store(vector_db=vector_db)
    await store.ensure_collection(COLLECTION, dim=4)
    
    errors = []
    sink_id = logger.add(lambda message: errors.append(str(message)), level="ERROR")
    try:
        stored = await store.upsert(COLLECTION, ["pool closes at 10pm"])
    finally:
        logger.remove(sink_id)
    
    assert stored == 0
    assert await vector_db.count(COLLECTION) == 0
    assert any("EMBEDDING_DIM" in message for message in errors)
