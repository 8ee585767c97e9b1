from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Splitter settings loaded from .env file.

    Every field has a default matching the recursive splitter the ingestion
    pipeline has always used (300-token segments, 30-token overlap, tiktoken
    counts), so the engine runs without any environment configured.
    """

    # Segment budgets (tokens as counted by the configured estimator)
    max_segment_size_tokens: int = 300
    max_overlap_size_tokens: int = 30

    # Token estimation: "tiktoken", "characters" or "words"
    token_estimator: str = "tiktoken"
    tiktoken_encoding: str = "cl100k_base"
    # Only used by the "characters" estimator
    chars_per_token: float = 4.0

    # Separator hierarchy preset from config/separators.yaml
    separator_preset: str = "prose"

    # What to do with a fragment that exceeds the budget at the finest level:
    # "allow" keeps it as an oversized segment, "error" raises
    oversized_policy: Literal["allow", "error"] = "allow"

    # Metadata key receiving the segment position; empty string disables it
    segment_index_key: str = "index"

    log_level: str = "INFO"

    # Pydantic v2 configuration: accept extra env vars and set env file
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
