"""
Configuration Management
Application settings loaded from environment variables

This module provides type-safe configuration using Pydantic Settings.
All configuration values can be set via environment variables or .env file.
"""
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List, Tuple
import os
import re
from pathlib import Path


_TABLE_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class Settings(BaseSettings):
    """Application settings with type validation and defaults"""

    # ==================== Environment ====================
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # ==================== Contract Store ====================
    # Choice: "memory" (in-process snapshot), "postgres" (psycopg2) or "supabase"
    STORE_BACKEND: str = os.getenv("STORE_BACKEND", "memory")
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")
    DATABASE_POOL_SIZE: int = int(os.getenv("DATABASE_POOL_SIZE", "5"))
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
    SUPABASE_KEY: str = os.getenv("SUPABASE_KEY", "")
    SUPABASE_PAGE_SIZE: int = int(os.getenv("SUPABASE_PAGE_SIZE", "1000"))  # Supabase default max per page

    # ==================== Table Names (Configurable) ====================
    CONTRACTS_TABLE_NAME: str = os.getenv("CONTRACTS_TABLE_NAME", "contracts")
    # CSV loaded into the memory store at startup (optional)
    SEED_CSV_PATH: str = os.getenv("SEED_CSV_PATH", "")

    # ==================== Embeddings ====================
    # Choose: "hashing" (local, deterministic), "openai" or "sentence-transformers"
    EMBEDDING_PROVIDER: str = os.getenv("EMBEDDING_PROVIDER", "hashing")
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    EMBEDDING_MODEL: str = os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")
    SENTENCE_TRANSFORMERS_MODEL: str = os.getenv("SENTENCE_TRANSFORMERS_MODEL", "sentence-transformers/all-MiniLM-L6-v2")
    EMBEDDING_DIMENSION: int = int(os.getenv("EMBEDDING_DIMENSION", "384"))  # 384 hashing/MiniLM, 1536 OpenAI small
    EMBEDDING_BATCH_SIZE: int = int(os.getenv("EMBEDDING_BATCH_SIZE", "10"))  # Concurrent embedding calls per batch
    EMBEDDING_TIMEOUT_SECONDS: float = float(os.getenv("EMBEDDING_TIMEOUT_SECONDS", "30"))
    EMBEDDING_MAX_RETRIES: int = int(os.getenv("EMBEDDING_MAX_RETRIES", "3"))

    # ==================== Search Configuration ====================
    DEFAULT_PAGE_SIZE: int = int(os.getenv("DEFAULT_PAGE_SIZE", "20"))
    MAX_PAGE_SIZE: int = int(os.getenv("MAX_PAGE_SIZE", "100"))
    DEFAULT_STATUS: str = os.getenv("DEFAULT_STATUS", "active")
    # Comma-separated phrases added to the built-in phrase list
    EXTRA_KNOWN_PHRASES: str = os.getenv("EXTRA_KNOWN_PHRASES", "")

    # ==================== Suggestions ====================
    SUGGESTION_CACHE_TTL_SECONDS: int = int(os.getenv("SUGGESTION_CACHE_TTL_SECONDS", "300"))  # 5 minutes
    LEXICAL_MAX_SUGGESTIONS: int = int(os.getenv("LEXICAL_MAX_SUGGESTIONS", "6"))
    LEXICAL_MIN_FREQUENCY: int = int(os.getenv("LEXICAL_MIN_FREQUENCY", "2"))
    SEMANTIC_MIN_SIMILARITY: float = float(os.getenv("SEMANTIC_MIN_SIMILARITY", "0.7"))
    SEMANTIC_MAX_SUGGESTIONS: int = int(os.getenv("SEMANTIC_MAX_SUGGESTIONS", "8"))
    SEMANTIC_MIN_TERM_FREQUENCY: int = int(os.getenv("SEMANTIC_MIN_TERM_FREQUENCY", "2"))
    SEMANTIC_PHRASE_MIN_LENGTH: int = int(os.getenv("SEMANTIC_PHRASE_MIN_LENGTH", "1"))
    SEMANTIC_PHRASE_MAX_LENGTH: int = int(os.getenv("SEMANTIC_PHRASE_MAX_LENGTH", "5"))
    SEMANTIC_INDEX_ON_STARTUP: bool = os.getenv("SEMANTIC_INDEX_ON_STARTUP", "false").lower() == "true"

    # ==================== Indexing API ====================
    INDEXING_API_KEY: str = os.getenv("INDEXING_API_KEY", "")
    MAX_TRACKED_JOBS: int = int(os.getenv("MAX_TRACKED_JOBS", "100"))

    # ==================== Logging ====================
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: str = os.getenv("LOG_FILE", "logs/app.log")  # Empty string disables the file handler

    # ==================== API Configuration ====================
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))

    # ==================== Validation ====================
    def validate_store_backend(self) -> str:
        """Validate contract store choice"""
        if self.STORE_BACKEND not in ["memory", "postgres", "supabase"]:
            raise ValueError(
                f"STORE_BACKEND must be 'memory', 'postgres' or 'supabase', got: {self.STORE_BACKEND}"
            )
        return self.STORE_BACKEND

    def validate_embedding_provider(self) -> str:
        """Validate embedding provider choice"""
        if self.EMBEDDING_PROVIDER not in ["hashing", "openai", "sentence-transformers"]:
            raise ValueError(
                "EMBEDDING_PROVIDER must be 'hashing', 'openai' or 'sentence-transformers', "
                f"got: {self.EMBEDDING_PROVIDER}"
            )
        return self.EMBEDDING_PROVIDER

    def validate_phrase_range(self) -> Tuple[int, int]:
        """Validate semantic phrase length range"""
        if self.SEMANTIC_PHRASE_MIN_LENGTH < 1:
            raise ValueError(f"SEMANTIC_PHRASE_MIN_LENGTH ({self.SEMANTIC_PHRASE_MIN_LENGTH}) must be at least 1")
        if self.SEMANTIC_PHRASE_MAX_LENGTH < self.SEMANTIC_PHRASE_MIN_LENGTH:
            raise ValueError(
                f"SEMANTIC_PHRASE_MAX_LENGTH ({self.SEMANTIC_PHRASE_MAX_LENGTH}) must not be less than "
                f"SEMANTIC_PHRASE_MIN_LENGTH ({self.SEMANTIC_PHRASE_MIN_LENGTH})"
            )
        return self.SEMANTIC_PHRASE_MIN_LENGTH, self.SEMANTIC_PHRASE_MAX_LENGTH

    def validate_table_name(self) -> str:
        """Table names are interpolated into SQL, so only plain identifiers are accepted"""
        if not _TABLE_NAME_PATTERN.match(self.CONTRACTS_TABLE_NAME):
            raise ValueError(f"CONTRACTS_TABLE_NAME is not a valid identifier: {self.CONTRACTS_TABLE_NAME!r}")
        return self.CONTRACTS_TABLE_NAME

    @property
    def phrase_length_range(self) -> Tuple[int, int]:
        return self.SEMANTIC_PHRASE_MIN_LENGTH, self.SEMANTIC_PHRASE_MAX_LENGTH

    @property
    def extra_known_phrases(self) -> List[str]:
        return [p.strip().lower() for p in self.EXTRA_KNOWN_PHRASES.split(",") if p.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"
        # Look for .env file in the project root (2 levels up from govcon_search/core/config.py)
        env_file_path = Path(__file__).parent.parent.parent / ".env"
        if env_file_path.exists():
            env_file = str(env_file_path)
        else:
            # Also check current directory
            current_dir_env = Path.cwd() / ".env"
            if current_dir_env.exists():
                env_file = str(current_dir_env)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance (singleton pattern)

    Returns:
        Settings: Application settings instance
    """
    settings = Settings()
    # Validate on first load
    settings.validate_store_backend()
    settings.validate_embedding_provider()
    settings.validate_phrase_range()
    settings.validate_table_name()
    return settings


# Global settings instance for easy import
settings = get_settings()
