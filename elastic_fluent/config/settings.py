"""
Configuration settings for the elastic-fluent client library.
This module manages all environment variables and library defaults.
"""

from pathlib import Path
from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings

from elastic_fluent.models.schemas import ElasticConfig, IndexDefaults


class Settings(BaseSettings):
    """Main settings class for elastic-fluent."""

    # Project settings
    PROJECT_NAME: str = "elastic-fluent"
    VERSION: str = "0.1.0"
    DEBUG: bool = Field(default=False)

    # Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent.parent
    LOGS_DIR: Path = PROJECT_ROOT / "logs"

    # Elasticsearch connection (passed through to the elasticsearch client)
    ELASTICSEARCH_HOSTS: str = Field(default="http://localhost:9200")
    ELASTICSEARCH_USERNAME: Optional[str] = Field(default=None)
    ELASTICSEARCH_PASSWORD: Optional[str] = Field(default=None)
    ELASTICSEARCH_API_KEY: Optional[str] = Field(default=None)
    ELASTICSEARCH_VERIFY_CERTS: bool = Field(default=True)
    ELASTICSEARCH_RETRIES: int = Field(default=3, ge=0)
    ELASTICSEARCH_REQUEST_TIMEOUT: Optional[float] = Field(default=None)

    # Index defaults
    DEFAULT_NUMBER_OF_SHARDS: int = Field(default=1, ge=1)
    DEFAULT_NUMBER_OF_REPLICAS: int = Field(default=1, ge=0)

    # Embedding providers
    EMBEDDING_API_URL: str = Field(default="http://localhost:11434")  # Ollama
    OPENAI_API_KEY: Optional[str] = Field(default=None)
    HUGGINGFACE_API_TOKEN: Optional[str] = Field(default=None)
    HUGGINGFACE_API_URL: str = Field(
        default="https://api-inference.huggingface.co/pipeline/feature-extraction"
    )
    EMBEDDING_REQUEST_TIMEOUT: float = Field(default=30.0, gt=0)
    MODEL_REGISTRY_PATH: Optional[str] = Field(default=None)

    # Logging settings
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    def host_list(self) -> List[str]:
        """Split the comma separated ELASTICSEARCH_HOSTS value."""
        return [host.strip() for host in self.ELASTICSEARCH_HOSTS.split(",") if host.strip()]

    def elastic_config(self) -> ElasticConfig:
        """Resolve the Elasticsearch connection options once."""
        basic_auth = None
        if self.ELASTICSEARCH_USERNAME:
            basic_auth = (self.ELASTICSEARCH_USERNAME, self.ELASTICSEARCH_PASSWORD or "")

        return ElasticConfig(
            hosts=self.host_list(),
            basic_auth=basic_auth,
            api_key=self.ELASTICSEARCH_API_KEY,
            ssl_verification=self.ELASTICSEARCH_VERIFY_CERTS,
            retries=self.ELASTICSEARCH_RETRIES,
            request_timeout=self.ELASTICSEARCH_REQUEST_TIMEOUT,
        )

    def index_defaults(self) -> IndexDefaults:
        """Default settings applied to indices created by the embedding manager."""
        return IndexDefaults(
            number_of_shards=self.DEFAULT_NUMBER_OF_SHARDS,
            number_of_replicas=self.DEFAULT_NUMBER_OF_REPLICAS,
        )


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get library settings."""
    return settings
