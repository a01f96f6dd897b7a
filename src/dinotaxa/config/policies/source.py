"""External taxonomy source (PBDB) policy models."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field, field_validator


DEFAULT_GROUPS = [
    "Saurischia",
    "Ornithischia",
    "Theropoda",
    "Sauropodomorpha",
    "Ceratopsia",
    "Ornithopoda",
    "Thyreophora",
]


class RateLimitSettings(BaseModel):
    """Token-bucket settings shared by every outgoing request."""

    requests_per_second: float = Field(
        default=4.0,
        ge=0.0,
        description="Sustained request rate; 0 disables throttling.",
    )
    burst: int = Field(default=2, ge=1)


class SourcePolicy(BaseModel):
    """Controls for querying the Paleobiology Database data service."""

    base_url: str = Field(default="https://paleobiodb.org/data1.2", min_length=1)
    groups: List[str] = Field(
        default_factory=lambda: list(DEFAULT_GROUPS),
        description="Higher taxa queried for species lists; group queries may overlap.",
    )
    min_ma: float = Field(
        default=66.0,
        ge=0.0,
        description="Species must first appear no younger than this age (Ma).",
    )
    page_size: int | None = Field(
        default=None,
        description="Page size for species list queries; None requests every record at once.",
    )
    max_pages: int = Field(
        default=1000,
        ge=1,
        description="Upper bound on pages fetched per group when page_size is set.",
    )
    request_timeout_seconds: float = Field(default=30.0, ge=0.1)
    max_workers: int = Field(default=4, ge=1, le=32)
    user_agent: str = Field(default="dinotaxa/0.1", min_length=3)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)

    @field_validator("groups")
    @classmethod
    def _strip_groups(cls, value: List[str]) -> List[str]:
        groups = [group.strip() for group in value if group and group.strip()]
        return list(dict.fromkeys(groups))

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("page_size")
    @classmethod
    def _validate_page_size(cls, value: int | None) -> int | None:
        if value is not None and value <= 0:
            raise ValueError("page_size must be positive when provided")
        return value
