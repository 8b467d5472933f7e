"""Branch graph reconstruction from a commit log."""

from autopatch.graph.builder import CommitGraphBuilder
from autopatch.graph.graph import CommitGraph

__all__ = [
    "CommitGraph",
    "CommitGraphBuilder",
]
