"""Taxonomy tree assembly public API."""

from __future__ import annotations

from .assembler import TreeBuilder, TreeBuildResult, build_tree
from .graph import SPECIES_KIND, TAXON_KIND, TaxonomyTree, TreeNode
from .io import EXPORT_FORMATS, export_tree, render_dot, write_build_manifest

__all__ = [
    "EXPORT_FORMATS",
    "SPECIES_KIND",
    "TAXON_KIND",
    "TaxonomyTree",
    "TreeBuildResult",
    "TreeBuilder",
    "TreeNode",
    "build_tree",
    "export_tree",
    "render_dot",
    "write_build_manifest",
]
