"""Arena-backed rooted tree used to merge species lineages."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterator, List, MutableMapping

from dinotaxa.utils.logging import get_logger

_LOGGER = get_logger(module=__name__)

TAXON_KIND = "taxon"
SPECIES_KIND = "species"


class TreeNode:
    """Single placement of a taxon inside a :class:`TaxonomyTree`."""

    __slots__ = ("id", "name", "rank", "kind", "parent", "children")

    def __init__(
        self,
        id: str,
        name: str,
        rank: int,
        *,
        kind: str = TAXON_KIND,
        parent: "TreeNode | None" = None,
    ) -> None:
        self.id = id
        self.name = name
        self.rank = rank
        self.kind = kind
        self.parent = parent
        self.children: List[TreeNode] = []

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"TreeNode(id={self.id!r}, name={self.name!r}, kind={self.kind!r})"

    @property
    def parent_id(self) -> str | None:
        return self.parent.id if self.parent is not None else None

    def child(self, taxon_id: str) -> "TreeNode | None":
        for candidate in self.children:
            if candidate.id == taxon_id:
                return candidate
        return None

    def sorted_children(self) -> List["TreeNode"]:
        return sorted(self.children, key=lambda node: (node.name, node.id))


class TaxonomyTree:
    """Rooted tree holding every node in an arena plus an ``id -> node`` index.

    Under the strict parentage policy each id has exactly one placement. The
    permissive policy may place the same id under several parents; the index
    then keeps every placement in insertion order and :meth:`get` returns the
    first one.
    """

    def __init__(self, root_id: str, root_name: str, root_rank: int = 0) -> None:
        self._arena: List[TreeNode] = []
        self._index: MutableMapping[str, List[TreeNode]] = defaultdict(list)
        self._root = self._register(TreeNode(root_id, root_name, root_rank))

    # ------------------------------------------------------------------
    # Introspection helpers
    # ------------------------------------------------------------------
    def __contains__(self, taxon_id: str) -> bool:
        return bool(self._index.get(taxon_id))

    def __len__(self) -> int:
        return len(self._arena)

    @property
    def root(self) -> TreeNode:
        return self._root

    def get(self, taxon_id: str) -> TreeNode | None:
        placements = self._index.get(taxon_id)
        return placements[0] if placements else None

    def placements(self, taxon_id: str) -> List[TreeNode]:
        return list(self._index.get(taxon_id, []))

    def parent_of(self, taxon_id: str) -> str | None:
        node = self.get(taxon_id)
        return node.parent_id if node is not None else None

    def iter_nodes(self) -> Iterator[TreeNode]:
        """Pre-order traversal with children visited in ``(name, id)`` order."""

        stack = [self._root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.sorted_children()))

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def _register(self, node: TreeNode) -> TreeNode:
        self._arena.append(node)
        self._index[node.id].append(node)
        return node

    def add_child(self, parent: TreeNode, taxon_id: str, name: str, rank: int) -> TreeNode:
        node = self._register(TreeNode(taxon_id, name, rank, parent=parent))
        parent.children.append(node)
        _LOGGER.debug("Inserted taxon into tree", taxon_id=taxon_id, parent_id=parent.id)
        return node

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def path_to(self, taxon_id: str) -> List[str]:
        """Return ids from the root down to ``taxon_id`` (empty when absent)."""

        node = self.get(taxon_id)
        path: List[str] = []
        while node is not None:
            path.append(node.id)
            node = node.parent
        path.reverse()
        return path

    def subtree(self, taxon_id: str) -> dict | None:
        node = self.get(taxon_id)
        return self.to_dict(node) if node is not None else None

    def find_by_name(self, name: str) -> List[TreeNode]:
        needle = name.strip().lower()
        return [node for node in self.iter_nodes() if node.name.lower() == needle]

    def species(self) -> List[TreeNode]:
        return [node for node in self.iter_nodes() if node.kind == SPECIES_KIND]

    # ------------------------------------------------------------------
    # Analytics & export helpers
    # ------------------------------------------------------------------
    def statistics(self) -> Dict[str, object]:
        """Return structural statistics for run summaries and manifests."""

        depth_of: Dict[int, int] = {id(self._root): 0}
        max_depth = 0
        for node in self.iter_nodes():
            depth = depth_of[id(node)]
            max_depth = max(max_depth, depth)
            for child in node.children:
                depth_of[id(child)] = depth + 1
        species_count = sum(1 for node in self._arena if node.kind == SPECIES_KIND)
        return {
            "node_count": len(self._arena),
            "unique_taxa": len([key for key, nodes in self._index.items() if nodes]),
            "species_count": species_count,
            "taxon_count": len(self._arena) - species_count,
            "max_depth": max_depth,
            "max_out_degree": max((len(node.children) for node in self._arena), default=0),
            "duplicated_ids": sorted(key for key, nodes in self._index.items() if len(nodes) > 1),
        }

    def to_dict(self, node: TreeNode | None = None) -> dict:
        """Nested ``{id, name, rank, type, children}`` mapping rooted at ``node``."""

        start = node or self._root
        return {
            "id": start.id,
            "name": start.name,
            "rank": start.rank,
            "type": start.kind,
            "children": [self.to_dict(child) for child in start.sorted_children()],
        }

    def adjacency(self) -> Dict[str, List[str]]:
        """Return ``parent id -> sorted child ids`` for every placed node."""

        mapping: Dict[str, set] = defaultdict(set)
        for node in self._arena:
            mapping.setdefault(node.id, set())
            if node.parent is not None:
                mapping[node.parent.id].add(node.id)
        return {key: sorted(children) for key, children in sorted(mapping.items())}


__all__ = ["SPECIES_KIND", "TAXON_KIND", "TaxonomyTree", "TreeNode"]
