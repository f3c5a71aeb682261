"""
Embedding Services
Turns text into vectors for the knowledge base.
- OpenAI-compatible endpoint (default, 1536 dimensions)
- Ollama local model (mxbai-embed-large, 1024 dimensions)
"""

import asyncio
from typing import List, Optional

import numpy as np
import ollama
from loguru import logger
from openai import AsyncOpenAI

from ..config import settings


class EmbeddingService:
    """Base class: ``embed(text) -> List[float]``"""
    
    model: str = ""
    embedding_dim: int = 0
    
    async def embed(self, text: str) -> List[float]:
        raise NotImplementedError
    
    @property
    def model_info(self) -> dict:
        return {
            "model": self.model,
            "embedding_dim": self.embedding_dim
        }


class OpenAIEmbeddingService(EmbeddingService):
    """
    Embeddings through the OpenAI API (or any compatible gateway)
    
    Usage:
        embedder = OpenAIEmbeddingService()
        vector = await embedder.embed("Is there free parking?")
    """
    
    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        model: Optional[str] = None,
        embedding_dim: Optional[int] = None,
        timeout: Optional[float] = None
    ):
        self.client = client or AsyncOpenAI(
            api_key=settings.OPENAI_API_KEY,
            base_url=settings.OPENAI_BASE_URL
        )
        self.model = model or settings.EMBEDDING_MODEL
        self.embedding_dim = embedding_dim or settings.EMBEDDING_DIM
        self.timeout = timeout or settings.EMBEDDING_TIMEOUT_SECONDS
        
        logger.info(
            f"Embedding Service initialized: {self.model} "
            f"({self.embedding_dim} dimensions)"
        )
    
    async def embed(self, text: str) -> List[float]:
        """
        Generate embedding for a text
        
        Raises:
            RuntimeError: If embedding generation fails or times out
        """
        try:
            response = await asyncio.wait_for(
                self.client.embeddings.create(model=self.model, input=text),
                timeout=self.timeout
            )
        except asyncio.TimeoutError:
            raise RuntimeError(f"Embedding timed out after {self.timeout}s")
        except Exception as e:
            raise RuntimeError(f"Embedding generation failed: {e}")
        
        embedding = list(response.data[0].embedding)
        
        if len(embedding) != self.embedding_dim:
            logger.warning(
                f"Unexpected embedding dimension: {len(embedding)} "
                f"(expected {self.embedding_dim})"
            )
        
        logger.debug(f"Generated embedding for: '{text[:50]}...' ({len(embedding)} dims)")
        return embedding


class OllamaEmbeddingService(EmbeddingService):
    """
    Ollama-based embedding service (local, free)
    
    Make sure the model is pulled first: ollama pull mxbai-embed-large
    """
    
    def __init__(
        self,
        model: Optional[str] = None,
        host: Optional[str] = None,
        embedding_dim: Optional[int] = None,
        timeout: Optional[float] = None
    ):
        self.model = model or settings.OLLAMA_EMBEDDING_MODEL
        self.ollama_host = host or settings.OLLAMA_BASE_URL
        self.embedding_dim = embedding_dim or settings.EMBEDDING_DIM
        self.timeout = timeout or settings.EMBEDDING_TIMEOUT_SECONDS
        self.client = ollama.AsyncClient(host=self.ollama_host)
        
        logger.info(
            f"Embedding Service initialized: {self.model} via {self.ollama_host} "
            f"({self.embedding_dim} dimensions)"
        )
    
    async def embed(self, text: str) -> List[float]:
        try:
            response = await asyncio.wait_for(
                self.client.embeddings(model=self.model, prompt=text),
                timeout=self.timeout
            )
        except asyncio.TimeoutError:
            raise RuntimeError(f"Embedding timed out after {self.timeout}s")
        except Exception as e:
            raise RuntimeError(f"Ollama embedding failed: {e}")
        
        embedding = list(response["embedding"])
        
        if len(embedding) != self.embedding_dim:
            logger.warning(
                f"Unexpected embedding dimension: {len(embedding)} "
                f"(expected {self.embedding_dim})"
            )
        
        return embedding
    
    @property
    def model_info(self) -> dict:
        return {
            "model": self.model,
            "embedding_dim": self.embedding_dim,
            "ollama_host": self.ollama_host
        }


def cosine_similarity(embedding1: List[float], embedding2: List[float]) -> float:
    """
    Calculate cosine similarity between two embeddings
    
    Returns:
        float: Cosine similarity, 0.0 when either vector is all zeros
    """
    vec1 = np.asarray(embedding1, dtype=np.float32)
    vec2 = np.asarray(embedding2, dtype=np.float32)
    
    if vec1.shape != vec2.shape:
        return 0.0
    
    norm1 = np.linalg.norm(vec1)
    norm2 = np.linalg.norm(vec2)
    
    if norm1 == 0 or norm2 == 0:
        return 0.0
    
    return float(np.dot(vec1, vec2) / (norm1 * norm2))


def create_embedding_service() -> EmbeddingService:
    """Pick the embedding backend from settings"""
    if settings.EMBEDDING_PROVIDER.lower() == "ollama":
        return OllamaEmbeddingService()
    return OpenAIEmbeddingService()
