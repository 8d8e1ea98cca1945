"""Configuration loader for the corpus ingestion pipeline."""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


class AppInfo(BaseModel):
    """Application metadata."""

    name: str = "Corpus Ingest"
    version: str = "1.0.0"
    log_level: str = "INFO"


class CorpusConfig(BaseModel):
    """Remote corpus host configuration."""

    base_url: str = "https://raw.githubusercontent.com/Sefaria/Sefaria-Export/master/json"
    source_language: str = "Hebrew"
    translation_language: str = "English"
    document_name: str = "merged.json"
    max_attempts: int = 3
    retry_delay_seconds: float = 2.0
    timeout_seconds: float = 30.0
    api_token: str | None = None


class IngestionConfig(BaseModel):
    """Batching and catalog configuration."""

    batch_size: int = 1000
    catalog_path: str | None = None


class StorageConfig(BaseModel):
    """Storage paths configuration."""

    sqlite_path: str = "./db/corpus.db"
    busy_timeout_seconds: float = 30.0


class AppConfig(BaseModel):
    """Root application configuration."""

    app: AppInfo = Field(default_factory=AppInfo)
    corpus: CorpusConfig = Field(default_factory=CorpusConfig)
    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)


def load_config(config_path: str | Path = "config.yaml") -> AppConfig:
    """Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Fully populated AppConfig instance.
    """
    load_dotenv()

    yaml_data: dict = {}
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file) as f:
            yaml_data = yaml.safe_load(f) or {}

    config = AppConfig(**yaml_data)

    # Secrets only come from the environment
    token = os.getenv("CORPUS_API_TOKEN")
    if token:
        config.corpus.api_token = token

    return config
