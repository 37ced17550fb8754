"""
Dynamic tree schema helpers.

These domain-agnostic helpers implement the singleton-block convention and
the YAML document wrapper used to exchange dynamic trees.
"""

from kubeshape.core.schema.document import TreeDocument
from kubeshape.core.schema.tree import (
    block_list,
    expand_each,
    expand_nested,
    first_block,
    has_block,
    singleton,
)

__all__ = [
    "TreeDocument",
    "block_list",
    "expand_each",
    "expand_nested",
    "first_block",
    "has_block",
    "singleton",
]
