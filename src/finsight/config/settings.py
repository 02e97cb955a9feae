"""Application settings loader from YAML configuration."""
import yaml
from pathlib import Path
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class AppSettings:
    """Application-wide settings loaded from config.yaml."""

    # App info
    app_name: str
    app_version: str

    # Logging
    log_level: str
    log_max_file_size_mb: int
    log_backup_count: int

    # Documents
    chunk_size: int
    embedding_batch_size: int
    match_threshold: float
    match_count: int
    document_max_upload_mb: int

    # Receipts
    receipt_max_upload_mb: int
    receipt_allowed_types: List[str]

    # Storage
    signed_url_seconds: int

    # Auth
    token_ttl_hours: float

    # LLM
    embedding_model: str
    completion_model: str
    temperature: float
    max_answer_tokens: int
    llm_max_retries: int
    llm_initial_delay_seconds: float
    llm_backoff_factor: float

    # Server
    server_host: str
    server_port: int

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "AppSettings":
        """Load settings from YAML file."""
        if config_path is None:
            config_path = Path(__file__).parent.parent / "config.yaml"

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)

        return cls(
            app_name=config["app"]["name"],
            app_version=config["app"]["version"],
            log_level=config["logging"]["level"],
            log_max_file_size_mb=config["logging"]["max_file_size_mb"],
            log_backup_count=config["logging"]["backup_count"],
            chunk_size=config["documents"]["chunk_size"],
            embedding_batch_size=config["documents"]["embedding_batch_size"],
            match_threshold=config["documents"]["match_threshold"],
            match_count=config["documents"]["match_count"],
            document_max_upload_mb=config["documents"]["max_upload_mb"],
            receipt_max_upload_mb=config["receipts"]["max_upload_mb"],
            receipt_allowed_types=config["receipts"]["allowed_types"],
            signed_url_seconds=config["storage"]["signed_url_seconds"],
            token_ttl_hours=config["auth"]["token_ttl_hours"],
            embedding_model=config["llm"]["embedding_model"],
            completion_model=config["llm"]["completion_model"],
            temperature=config["llm"]["temperature"],
            max_answer_tokens=config["llm"]["max_answer_tokens"],
            llm_max_retries=config["llm"]["max_retries"],
            llm_initial_delay_seconds=config["llm"]["initial_delay_seconds"],
            llm_backoff_factor=config["llm"]["backoff_factor"],
            server_host=config["server"]["host"],
            server_port=config["server"]["port"]
        )


# Global settings instance
_settings: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = AppSettings.load()
    return _settings
