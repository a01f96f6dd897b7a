"""Parsers turning raw source records into domain entities.

The data service answers in one of two vocabularies. List queries are issued
with ``vocab=pbdb`` and use long field names; point lookups by id use the
compact default vocabulary:

====================  ==================  =========================================
pbdb vocabulary       compact             meaning
====================  ==================  =========================================
``orig_no``           ``oid``             taxon identifier (compact form ``txn:N``)
``taxon_name``        ``nam``             scientific name
``taxon_rank``        ``rnk``             rank (label in pbdb, numeric in compact)
``parent_no``         ``par``             parent identifier
``parent_name``       ``prl``             parent name
``taxon_attr``        ``att``             author and year
``firstapp_max_ma``   ``fea``             earliest possible first appearance (Ma)
``firstapp_min_ma``   ``fla``             latest possible first appearance (Ma)
``lastapp_max_ma``    ``lea``             earliest possible last appearance (Ma)
``lastapp_min_ma``    ``lla``             latest possible last appearance (Ma)
``accepted_name``     ``acn``             accepted name when the record is a synonym
====================  ==================  =========================================
"""

from __future__ import annotations

from typing import Any, List, Mapping

from pydantic import ValidationError

from dinotaxa.entities.core import CandidateSpecies, TaxonRecord, normalize_taxon_id
from dinotaxa.utils.logging import get_logger

from .utils import to_float

_LOGGER = get_logger(module=__name__)


def _first(record: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = record.get(key)
        if value not in (None, ""):
            return value
    return None


def extract_records(payload: Any) -> List[Mapping[str, Any]]:
    """Return the ``records`` list of a response, treating absence as empty."""

    if not isinstance(payload, Mapping):
        return []
    records = payload.get("records")
    if not isinstance(records, list):
        return []
    return [record for record in records if isinstance(record, Mapping)]


def parse_candidate(record: Mapping[str, Any], group: str) -> CandidateSpecies | None:
    """Build a :class:`CandidateSpecies` from a species list record."""

    name = _first(record, "taxon_name", "nam")
    if not name:
        return None
    try:
        return CandidateSpecies(
            name=str(name),
            rank=str(_first(record, "taxon_rank", "rnk") or "species"),
            parent=_first(record, "parent_name", "prl"),
            group=group,
            family=_first(record, "family", "fml"),
            first_appearance_ma=to_float(_first(record, "firstapp_max_ma", "fea")),
            last_appearance_ma=to_float(_first(record, "lastapp_min_ma", "lla")),
            accepted_name=_first(record, "accepted_name", "acn"),
            attribution=_first(record, "taxon_attr", "att"),
        )
    except ValidationError as exc:
        _LOGGER.warning("Skipping malformed species record", group=group, name=name, error=str(exc))
        return None


def parse_taxon_record(record: Mapping[str, Any]) -> TaxonRecord | None:
    """Build a :class:`TaxonRecord` from either vocabulary."""

    taxon_id = normalize_taxon_id(_first(record, "oid", "orig_no", "taxon_no"))
    name = _first(record, "nam", "taxon_name")
    if taxon_id is None or not name:
        return None
    try:
        return TaxonRecord(
            id=taxon_id,
            name=str(name),
            rank=_first(record, "rnk", "taxon_rank"),
            parent_id=_first(record, "par", "parent_no"),
            attribution=_first(record, "att", "taxon_attr"),
            first_appearance_ma=to_float(_first(record, "fea", "firstapp_max_ma")),
            last_appearance_ma=to_float(_first(record, "lla", "lastapp_min_ma")),
        )
    except ValidationError as exc:
        _LOGGER.warning("Skipping malformed taxon record", taxon_id=taxon_id, error=str(exc))
        return None


__all__ = ["extract_records", "parse_candidate", "parse_taxon_record"]
