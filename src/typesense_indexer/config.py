from typing import Any, Dict, List, Optional

from pydantic import AnyHttpUrl, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    typesense_url: AnyHttpUrl = "http://localhost:8108"
    typesense_api_key: SecretStr = SecretStr("")
    typesense_timeout: float = 30.0
    typesense_health_timeout: float = 5.0

    contentserver_url: AnyHttpUrl = "http://localhost:8080/contentserver"
    contentserver_timeout: float = 30.0

    # Content-server mime types that map to an index document
    supported_mime_types: List[str] = []
    # Node data key that opts a node out of indexing
    exclude_from_search_key: str = "hideFromSearch"
    skip_hidden_nodes: bool = False

    # IndexID -> Typesense collection schema (JSON in the environment)
    collections: Dict[str, Dict[str, Any]] = {}
    search_preset: Optional[Dict[str, Any]] = None
    search_preset_name: str = "default"
    default_query_by: str = "title"

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

settings = Settings()
