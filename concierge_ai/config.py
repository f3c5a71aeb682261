"""
Concierge Service Configuration
Loads settings from environment variables
"""

import os
from typing import List, Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Settings:
    """Application settings loaded from environment"""
    
    # LLM Configuration (OpenAI-compatible endpoint, e.g. OpenRouter)
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_BASE_URL: Optional[str] = os.getenv("OPENAI_BASE_URL") or None
    DELIBERATE_MODEL: str = os.getenv("DELIBERATE_MODEL", "gpt-4o")
    REACTIVE_MODEL: str = os.getenv("REACTIVE_MODEL", "gpt-4o-mini")
    LLM_TIMEOUT_SECONDS: float = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))
    
    # Ollama Configuration (local fallback when no API key is set)
    OLLAMA_BASE_URL: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    OLLAMA_MODEL: str = os.getenv("OLLAMA_MODEL", "llama3.2")
    
    # Embeddings
    EMBEDDING_PROVIDER: str = os.getenv("EMBEDDING_PROVIDER", "openai")
    EMBEDDING_MODEL: str = os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")
    OLLAMA_EMBEDDING_MODEL: str = os.getenv("OLLAMA_EMBEDDING_MODEL", "mxbai-embed-large")
    # Native dimension of each provider's default model
    EMBEDDING_DIMENSIONS = {"openai": 1536, "ollama": 1024}
    EMBEDDING_DIM: int = int(
        os.getenv("EMBEDDING_DIM") or EMBEDDING_DIMENSIONS.get(EMBEDDING_PROVIDER.lower(), 1536)
    )
    EMBEDDING_TIMEOUT_SECONDS: float = float(os.getenv("EMBEDDING_TIMEOUT_SECONDS", "30"))
    
    # Redis Configuration (vector database)
    REDIS_HOST: str = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT: int = int(os.getenv("REDIS_PORT", "6379"))
    REDIS_DB: int = int(os.getenv("REDIS_DB", "0"))
    REDIS_PASSWORD: str = os.getenv("REDIS_PASSWORD", "")
    
    # Knowledge base
    KNOWLEDGE_COLLECTION: str = os.getenv("KNOWLEDGE_COLLECTION", "stays_knowledge")
    KNOWLEDGE_SEARCH_LIMIT: int = int(os.getenv("KNOWLEDGE_SEARCH_LIMIT", "5"))
    KNOWLEDGE_SCORE_THRESHOLD: float = float(os.getenv("KNOWLEDGE_SCORE_THRESHOLD", "0.3"))
    KNOWLEDGE_FILE_PATH: str = os.getenv("KNOWLEDGE_FILE_PATH", "knowledge.json")
    
    # Sync schedule
    SYNC_INITIAL_DELAY_SECONDS: float = float(os.getenv("SYNC_INITIAL_DELAY_SECONDS", "10"))
    SYNC_INTERVAL_SECONDS: float = float(os.getenv("SYNC_INTERVAL_SECONDS", "3600"))
    SYNC_DEBOUNCE_SECONDS: float = float(os.getenv("SYNC_DEBOUNCE_SECONDS", "2.0"))
    CATALOG_PAGE_SIZE: int = int(os.getenv("CATALOG_PAGE_SIZE", "200"))
    
    # MySQL Configuration
    DB_HOST: str = os.getenv("DB_HOST", "localhost")
    DB_PORT: int = int(os.getenv("DB_PORT", "3306"))
    DB_USER: str = os.getenv("DB_USER", "root")
    DB_PASSWORD: str = os.getenv("DB_PASSWORD", "password")
    DB_NAME: str = os.getenv("DB_NAME", "stays")
    
    # Separate read-only account for model-authored queries
    DB_READONLY_USER: str = os.getenv("DB_READONLY_USER", "")
    DB_READONLY_PASSWORD: str = os.getenv("DB_READONLY_PASSWORD", "")
    
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "5"))
    SQL_ROW_LIMIT: int = int(os.getenv("SQL_ROW_LIMIT", "20"))
    
    # Tool audit records: "mysql" (AgentExecutionLogs table) or "log"
    AUDIT_SINK: str = os.getenv("AUDIT_SINK", "mysql").lower()
    
    # Email (SMTP)
    SMTP_HOST: str = os.getenv("SMTP_HOST", "localhost")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USER: str = os.getenv("SMTP_USER", "")
    SMTP_PASSWORD: str = os.getenv("SMTP_PASSWORD", "")
    EMAIL_FROM: str = os.getenv("EMAIL_FROM", "no-reply@stays.local")
    EMAIL_TIMEOUT_SECONDS: float = float(os.getenv("EMAIL_TIMEOUT_SECONDS", "20"))
    
    # Travel data providers
    SERPAPI_KEY: str = os.getenv("SERPAPI_KEY", "")
    TICKETMASTER_KEY: str = os.getenv("TICKETMASTER_KEY", "")
    HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "20"))
    MAX_HOTEL_RESULTS: int = int(os.getenv("MAX_HOTEL_RESULTS", "3"))
    
    # API Configuration
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))
    API_ENV: str = os.getenv("API_ENV", "development")
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "http://localhost:4200,http://localhost:3000")
    
    @property
    def cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]
    
    @property
    def use_openai(self) -> bool:
        """True when a usable API key is configured"""
        return bool(self.OPENAI_API_KEY) and not self.OPENAI_API_KEY.startswith("sk-your")
    
    def get_mysql_config(self, read_only: bool = False) -> dict:
        """
        Get MySQL connection configuration
        
        Args:
            read_only: Use the restricted read-only account when configured
        
        Returns:
            MySQL connection config dict
        """
        user = self.DB_USER
        password = self.DB_PASSWORD
        if read_only and self.DB_READONLY_USER:
            user = self.DB_READONLY_USER
            password = self.DB_READONLY_PASSWORD
        
        return {
            "host": self.DB_HOST,
            "port": self.DB_PORT,
            "user": user,
            "password": password,
            "database": self.DB_NAME,
            "charset": "utf8mb4",
            "collation": "utf8mb4_unicode_ci"
        }


# Global settings instance
settings = Settings()
