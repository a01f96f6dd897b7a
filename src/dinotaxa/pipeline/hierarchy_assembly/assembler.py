"""Tree builder that merges root-first lineages into one :class:`TaxonomyTree`."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Sequence, Tuple

from dinotaxa.config.policies import TreeBuildPolicy
from dinotaxa.entities.core import Lineage, TaxonRecord
from dinotaxa.errors import InconsistentParentage, RootNotFound
from dinotaxa.source.cache import TaxonCache
from dinotaxa.utils.logging import get_logger

from .graph import SPECIES_KIND, TaxonomyTree, TreeNode

_LOGGER = get_logger(module=__name__)

LineageLike = Lineage | Sequence[str]
TaxonInfo = Mapping[str, TaxonRecord] | TaxonCache


@dataclass
class TreeBuildResult:
    """Materialised results returned by :class:`TreeBuilder`."""

    tree: TaxonomyTree
    merged: int = 0
    rejected: List[dict] = field(default_factory=list)
    conflicts: List[dict] = field(default_factory=list)
    placeholders: List[str] = field(default_factory=list)
    policy: dict = field(default_factory=dict)

    def to_manifest(self) -> dict:
        return {
            "policy": dict(self.policy),
            "tree_stats": self.tree.statistics(),
            "merged": self.merged,
            "rejected": list(self.rejected),
            "conflicts": list(self.conflicts),
            "placeholders": list(self.placeholders),
        }


def _lineage_ids(lineage: LineageLike) -> Tuple[str, List[str]]:
    if isinstance(lineage, Lineage):
        return lineage.species_id, list(lineage.taxon_ids)
    ids = [str(item) for item in lineage]
    return (ids[-1] if ids else ""), ids


def _as_mapping(taxon_info: TaxonInfo) -> Mapping[str, TaxonRecord]:
    if isinstance(taxon_info, TaxonCache):
        return taxon_info.snapshot()
    return taxon_info


class TreeBuilder:
    """Main coordinator for tree assembly.

    Lineages are merged in the order given. Under the ``strict`` policy a
    lineage is checked against the index before any mutation; a taxon already
    placed under a different parent rejects that whole lineage with
    :class:`InconsistentParentage` and the build moves on. Under
    ``permissive`` the lookup is by id among the current node's children only,
    so such a taxon is placed a second time and a warning conflict is
    recorded.
    """

    def __init__(self, policy: TreeBuildPolicy | None = None) -> None:
        self._policy = policy or TreeBuildPolicy()

    @property
    def policy(self) -> TreeBuildPolicy:
        return self._policy

    # ------------------------------------------------------------------
    # Primary entry point
    # ------------------------------------------------------------------
    def build(self, lineages: Iterable[LineageLike], taxon_info: TaxonInfo) -> TreeBuildResult:
        info = _as_mapping(taxon_info)
        root = self.locate_root(info)
        tree = TaxonomyTree(root.id, root.name, root.rank)
        result = TreeBuildResult(tree=tree, policy=self._policy.model_dump(mode="json"))

        for lineage in lineages:
            species_id, ids = _lineage_ids(lineage)
            reason = self._precheck(tree, ids)
            if reason is not None:
                self._reject(result, species_id, reason)
                continue
            if self._policy.parentage_policy == "strict":
                try:
                    self.check_lineage(tree, ids)
                except InconsistentParentage as exc:
                    _LOGGER.error(
                        "Rejecting lineage with inconsistent parentage",
                        species_id=species_id,
                        taxon_id=exc.taxon_id,
                        existing_parent=exc.existing_parent,
                        new_parent=exc.new_parent,
                    )
                    result.conflicts.append(
                        {
                            "species_id": species_id,
                            "taxon_id": exc.taxon_id,
                            "existing_parent": exc.existing_parent,
                            "new_parent": exc.new_parent,
                            "action": "rejected",
                        }
                    )
                    self._reject(result, species_id, "inconsistent_parentage")
                    continue
            self.merge_lineage(tree, ids, info, result, species_id=species_id)
            result.merged += 1

        stats = tree.statistics()
        _LOGGER.info(
            "Assembled taxonomy tree",
            nodes=stats["node_count"],
            species=stats["species_count"],
            merged=result.merged,
            rejected=len(result.rejected),
            conflicts=len(result.conflicts),
        )
        return result

    # ------------------------------------------------------------------
    # Lineage handling
    # ------------------------------------------------------------------
    def locate_root(self, taxon_info: Mapping[str, TaxonRecord]) -> TaxonRecord:
        matches = sorted(
            (record for record in taxon_info.values() if record.name == self._policy.root_name),
            key=lambda record: record.id,
        )
        if not matches:
            raise RootNotFound(self._policy.root_name)
        return matches[0]

    def _precheck(self, tree: TaxonomyTree, ids: Sequence[str]) -> str | None:
        if not ids:
            return "empty"
        if ids[0] != tree.root.id:
            return "detached"
        if len(set(ids)) != len(ids):
            return "repeated_taxon"
        if len(tree) + len(ids) > self._policy.max_tree_size:
            return "tree_size_exceeded"
        return None

    def check_lineage(self, tree: TaxonomyTree, ids: Sequence[str]) -> None:
        """Raise :class:`InconsistentParentage` if ``ids`` disagrees with placed taxa."""

        for position in range(1, len(ids)):
            node = tree.get(ids[position])
            if node is None:
                continue
            expected = ids[position - 1]
            if node.parent_id != expected:
                raise InconsistentParentage(ids[position], node.parent_id, expected)

    def merge_lineage(
        self,
        tree: TaxonomyTree,
        ids: Sequence[str],
        taxon_info: Mapping[str, TaxonRecord],
        result: TreeBuildResult,
        *,
        species_id: str = "",
    ) -> TreeNode:
        current = tree.root
        for taxon_id in ids[1:]:
            existing = current.child(taxon_id)
            if existing is not None:
                current = existing
                continue
            placed = tree.get(taxon_id)
            if placed is not None:
                _LOGGER.warning(
                    "Placing taxon under a second parent",
                    species_id=species_id,
                    taxon_id=taxon_id,
                    existing_parent=placed.parent_id,
                    new_parent=current.id,
                )
                result.conflicts.append(
                    {
                        "species_id": species_id,
                        "taxon_id": taxon_id,
                        "existing_parent": placed.parent_id,
                        "new_parent": current.id,
                        "action": "duplicated",
                    }
                )
            name, rank = self._metadata(taxon_id, taxon_info, result)
            current = tree.add_child(current, taxon_id, name, rank)
        if current is not tree.root:
            current.kind = SPECIES_KIND
        return current

    def _metadata(
        self,
        taxon_id: str,
        taxon_info: Mapping[str, TaxonRecord],
        result: TreeBuildResult,
    ) -> Tuple[str, int]:
        record = taxon_info.get(taxon_id)
        if record is None:
            if taxon_id not in result.placeholders:
                result.placeholders.append(taxon_id)
            return self._policy.placeholder_name, self._policy.placeholder_rank
        return record.name, record.rank

    def _reject(self, result: TreeBuildResult, species_id: str, reason: str) -> None:
        if reason != "inconsistent_parentage":
            _LOGGER.warning("Rejecting lineage", species_id=species_id, reason=reason)
        result.rejected.append({"species_id": species_id, "reason": reason})


def build_tree(
    lineages: Iterable[LineageLike],
    taxon_info: TaxonInfo,
    policy: TreeBuildPolicy | None = None,
) -> TaxonomyTree:
    """Functional wrapper returning only the assembled tree."""

    return TreeBuilder(policy).build(lineages, taxon_info).tree


__all__ = ["TreeBuildResult", "TreeBuilder", "build_tree"]
