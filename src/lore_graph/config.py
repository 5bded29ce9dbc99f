"""Configuration management for Lore Graph."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BUNDLED_SEEDS_DIR = Path(__file__).parent / "seeds"


class Settings(BaseSettings):
    """Application settings, loaded from environment and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LORE_",
    )

    # Row store
    store_backend: Literal["memory", "neo4j"] = Field(default="memory")
    seeds_dir: Path = Field(default=BUNDLED_SEEDS_DIR)

    # Neo4j connection
    neo4j_uri: str = Field(default="bolt://localhost:7687")
    neo4j_user: str = Field(default="neo4j")
    neo4j_password: str = Field(default="loregraph123")
    neo4j_database: str | None = Field(default=None)

    # Query surface
    api_base_path: str = Field(default="/api/v1")
    default_page_size: int = Field(default=12, ge=1)
    max_page_size: int = Field(default=50, ge=1)
    search_limit: int = Field(default=12, ge=1, description="Default size of global search results")

    # Exploration
    default_graph_depth: int = Field(default=2, ge=1)
    max_graph_depth: int = Field(default=3, ge=1)
    default_path_depth: int = Field(default=4, ge=1)
    max_path_depth: int = Field(default=6, ge=1)
    default_graph_limit_per_relation: int = Field(default=4, ge=1)
    default_path_limit_per_relation: int = Field(default=6, ge=1)
    max_limit_per_relation: int = Field(default=12, ge=1)
    default_backlinks: bool = Field(default=True)

    # Compare
    max_compare_items: int = Field(default=6, ge=2)

    # Processing settings
    max_workers: int = Field(default=0, ge=0, description="Threads for concurrent store reads, 0 = sequential")
    log_level: str = Field(default="WARNING")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
