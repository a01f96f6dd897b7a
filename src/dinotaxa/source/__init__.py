"""External taxonomy source package exports."""

from __future__ import annotations

from dinotaxa.config.policies import SourcePolicy

from .cache import TaxonCache
from .client import GroupFetchResult, SourceClient
from .records import extract_records, parse_candidate, parse_taxon_record
from .utils import RateLimiter


def build_source_client(policy: SourcePolicy) -> SourceClient:
    """Construct a :class:`SourceClient` wired according to policy settings."""

    rate_limiter = RateLimiter(
        rate_per_second=policy.rate_limit.requests_per_second,
        burst=policy.rate_limit.burst,
    )
    return SourceClient(policy, rate_limiter=rate_limiter)


__all__ = [
    "GroupFetchResult",
    "RateLimiter",
    "SourceClient",
    "TaxonCache",
    "build_source_client",
    "extract_records",
    "parse_candidate",
    "parse_taxon_record",
]
