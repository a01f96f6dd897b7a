"""Paleobiology Database client with rate limiting and per-unit error isolation."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Sequence

import requests
from requests.exceptions import RequestException

from dinotaxa.config.policies import SourcePolicy
from dinotaxa.entities.core import CandidateSpecies, TaxonRecord
from dinotaxa.errors import SourceUnavailable
from dinotaxa.utils.logging import get_logger

from .records import extract_records, parse_candidate, parse_taxon_record
from .utils import RateLimiter

LIST_ENDPOINT = "taxa/list.json"
SINGLE_ENDPOINT = "taxa/single.json"

HttpGet = Callable[..., Any]


@dataclass
class GroupFetchResult:
    """Species gathered across several group queries."""

    species: List[CandidateSpecies] = field(default_factory=list)
    counts: Dict[str, int] = field(default_factory=dict)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def groups_requested(self) -> int:
        return len(self.counts) + len(self.failed)


class SourceClient:
    """Primary interface for the external taxonomy data service.

    Every request passes through one shared :class:`RateLimiter`. Transport
    errors, non-success statuses and undecodable payloads raise
    :class:`SourceUnavailable`; a ``404`` or an empty ``records`` list means
    nothing was found and is returned as an empty result.
    """

    def __init__(
        self,
        policy: SourcePolicy,
        *,
        rate_limiter: RateLimiter | None = None,
        http_get: HttpGet | None = None,
    ) -> None:
        self.policy = policy
        self.rate_limiter = rate_limiter or RateLimiter(
            rate_per_second=policy.rate_limit.requests_per_second,
            burst=policy.rate_limit.burst,
        )
        self._http_get = http_get or requests.get
        self._logger = get_logger(component="source_client", base_url=policy.base_url)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def _request(self, endpoint: str, params: Mapping[str, Any]) -> List[Mapping[str, Any]]:
        url = f"{self.policy.base_url}/{endpoint}"
        self.rate_limiter.acquire()
        try:
            response = self._http_get(
                url,
                params=dict(params),
                headers={"User-Agent": self.policy.user_agent, "Accept": "application/json"},
                timeout=self.policy.request_timeout_seconds,
            )
        except RequestException as exc:
            raise SourceUnavailable(f"Request failed for {url}: {exc}", url=url) from exc

        status = response.status_code
        if status == 404:
            self._logger.debug("Source returned not found", url=url, params=dict(params))
            return []
        if status >= 400:
            raise SourceUnavailable(
                f"Source returned HTTP {status} for {url}",
                url=url,
                status_code=status,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise SourceUnavailable(f"Undecodable response from {url}", url=url, status_code=status) from exc
        return extract_records(payload)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def fetch_species_by_group(self, group: str) -> List[CandidateSpecies]:
        """Return every accepted, extinct body-fossil species below ``group``."""

        params: Dict[str, Any] = {
            "base_name": group,
            "rank": "species",
            "status": "accepted",
            "vocab": "pbdb",
            "show": "attr,parent,app,family",
            "pres": "regular",
            "extant": "no",
            "min_ma": self.policy.min_ma,
        }
        page_size = self.policy.page_size
        raw: List[Mapping[str, Any]] = []
        if page_size is None:
            raw = self._request(LIST_ENDPOINT, dict(params, limit="all"))
        else:
            previous: List[Mapping[str, Any]] | None = None
            for page_number in range(self.policy.max_pages):
                offset = page_number * page_size
                page = self._request(LIST_ENDPOINT, dict(params, limit=page_size, offset=offset))
                if page == previous:
                    self._logger.warning("Source repeated a page; stopping", group=group, offset=offset)
                    break
                raw.extend(page)
                if len(page) < page_size:
                    break
                previous = page
            else:
                self._logger.warning("Page limit reached", group=group, max_pages=self.policy.max_pages)

        species = [candidate for candidate in (parse_candidate(r, group) for r in raw) if candidate]
        self._logger.info("Fetched species for group", group=group, count=len(species))
        return species

    def fetch_taxon_by_id(self, taxon_id: str) -> TaxonRecord | None:
        """Point lookup of a taxon's name, rank and immediate parent."""

        records = self._request(SINGLE_ENDPOINT, {"id": taxon_id, "show": "attr,app,parent"})
        if not records:
            self._logger.debug("No taxon found for id", taxon_id=taxon_id)
            return None
        return parse_taxon_record(records[0])

    def fetch_species_by_name(self, name: str) -> TaxonRecord | None:
        """Resolve a scientific name to its canonical species record."""

        records = self._request(
            LIST_ENDPOINT,
            {
                "name": name,
                "rank": "species",
                "status": "valid",
                "vocab": "pbdb",
                "show": "attr,app,parent",
            },
        )
        if not records:
            self._logger.debug("No species found for name", name=name)
            return None
        return parse_taxon_record(records[0])

    def fetch_groups(self, groups: Sequence[str] | None = None) -> GroupFetchResult:
        """Fetch several groups concurrently; a failing group contributes nothing."""

        targets = list(groups if groups is not None else self.policy.groups)
        result = GroupFetchResult()

        def fetch(group: str) -> tuple[str, List[CandidateSpecies] | None, str | None]:
            try:
                return group, self.fetch_species_by_group(group), None
            except SourceUnavailable as exc:
                self._logger.error("Group fetch failed; skipping", group=group, error=str(exc))
                return group, None, str(exc)

        with ThreadPoolExecutor(max_workers=self.policy.max_workers) as executor:
            outcomes = list(executor.map(fetch, targets))

        for group, species, error in outcomes:
            if species is None:
                result.failed[group] = error or "unavailable"
                continue
            if not species:
                self._logger.info("No species found for group", group=group)
            result.counts[group] = len(species)
            result.species.extend(species)

        self._logger.info(
            "Fetched species across groups",
            total=len(result.species),
            groups=len(targets),
            failed=len(result.failed),
        )
        return result


__all__ = ["GroupFetchResult", "HttpGet", "SourceClient"]
