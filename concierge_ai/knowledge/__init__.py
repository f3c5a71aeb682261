"""
Knowledge base: embeddings, vector storage and background sync
"""

from .embeddings import (
    EmbeddingService,
    OpenAIEmbeddingService,
    OllamaEmbeddingService,
    cosine_similarity,
    create_embedding_service
)
from .vector_store import RedisVectorDatabase, VectorRecord, ScoredPoint
from .knowledge_store import VectorKnowledgeStore, document_id
from .sources import KnowledgeDocument, KnowledgeRulesFile, listing_document, read_catalog_documents
from .sync import KnowledgeSyncCoordinator, SyncLock, SyncResult
from .watcher import KnowledgeFileWatcher, KnowledgeFileHandler

__all__ = [
    "EmbeddingService",
    "OpenAIEmbeddingService",
    "OllamaEmbeddingService",
    "cosine_similarity",
    "create_embedding_service",
    "RedisVectorDatabase",
    "VectorRecord",
    "ScoredPoint",
    "VectorKnowledgeStore",
    "document_id",
    "KnowledgeDocument",
    "KnowledgeRulesFile",
    "listing_document",
    "read_catalog_documents",
    "KnowledgeSyncCoordinator",
    "SyncLock",
    "SyncResult",
    "KnowledgeFileWatcher",
    "KnowledgeFileHandler",
]
