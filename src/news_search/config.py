from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Query limits
    min_query_length: int = 2
    max_results: int = 20
    max_suggestions: int = 8
    max_related: int = 3
    max_trending: int = 10

    # Interactive session
    debounce_seconds: float = 0.3

    # Corpus layout
    metadata_section_key: str = "meta"
    trending_section_key: str = "trending"
    required_sections: str = "hero,latest"

    # JSON corpus provider
    corpus_path: str = "data/news.json"
    retry_attempts: int = 3
    retry_delay: float = 1.0

    model_config = SettingsConfigDict(
        env_prefix="NEWS_SEARCH_",
        env_file=".env",
        extra="ignore"
    )

    @property
    def required_section_keys(self) -> List[str]:
        return [part.strip() for part in self.required_sections.split(",") if part.strip()]

settings = Settings()
