"""I/O utilities for taxonomy tree exports."""

from __future__ import annotations

from pathlib import Path

from dinotaxa.utils.helpers import ensure_directory, serialize_json
from dinotaxa.utils.logging import get_logger

from .assembler import TreeBuildResult
from .graph import TaxonomyTree

_LOGGER = get_logger(module=__name__)

EXPORT_FORMATS = ("json", "adjacency", "dot")


def render_dot(tree: TaxonomyTree) -> str:
    lines = ["digraph taxonomy {"]
    seen = set()
    for node in tree.iter_nodes():
        if node.id in seen:
            continue
        seen.add(node.id)
        label = node.name.replace('"', '\\"')
        shape = "ellipse" if node.kind == "species" else "box"
        lines.append(f'  "{node.id}" [label="{label}", shape={shape}];')
    for parent, children in tree.adjacency().items():
        for child in children:
            lines.append(f'  "{parent}" -> "{child}";')
    lines.append("}")
    return "\n".join(lines) + "\n"


def export_tree(tree: TaxonomyTree, output_path: str | Path, *, format: str = "json") -> Path:
    """Write ``tree`` as nested JSON, a flat adjacency map or Graphviz DOT."""

    path = Path(output_path)
    ensure_directory(path.parent)
    format = format.lower()
    if format == "json":
        serialize_json(tree.to_dict(), path)
    elif format == "adjacency":
        serialize_json(tree.adjacency(), path)
    elif format == "dot":
        path.write_text(render_dot(tree), encoding="utf-8")
    else:
        raise ValueError(f"unsupported tree export format: {format}")
    _LOGGER.info("Exported taxonomy tree", path=str(path), format=format)
    return path.resolve()


def write_build_manifest(result: TreeBuildResult, output_path: str | Path) -> Path:
    path = Path(output_path)
    ensure_directory(path.parent)
    serialize_json(result.to_manifest(), path)
    return path.resolve()


__all__ = ["EXPORT_FORMATS", "export_tree", "render_dot", "write_build_manifest"]
