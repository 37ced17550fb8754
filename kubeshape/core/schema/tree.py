"""Dynamic attribute tree helpers.

A dynamic tree is plain Python data: dicts with snake_case string keys, lists,
strings and booleans. Nested objects use the singleton-block convention: a
list holding zero or one dict, where ``[]`` means the block is unset and
``[{...}]`` means it is set. ``[{}]`` is a set block with no fields, which is
observably different from ``[]``.
"""

from typing import Any, Callable, Dict, List, Optional, TypeVar

from kubeshape.core.errors import DecodeError

Tree = Any
Block = Dict[str, Any]

T = TypeVar("T")


def singleton(block: Block) -> List[Block]:
    """Wrap a mapping as a set singleton block."""
    return [block]


def first_block(l: Optional[List[Any]], entity: Optional[str] = None) -> Optional[Block]:
    """Return the mapping held by a singleton block, or None when unset.

    Accepts ``None``, ``[]`` and ``[None]`` as unset, since configuration
    systems produce all three for an empty block.

    Args:
        l: Singleton block list
        entity: Entity name reported on failure (optional)

    Returns:
        The block's mapping, or None if the block is unset

    Raises:
        DecodeError: If the value is not a list of at most one mapping
    """
    if l is None:
        return None
    if not isinstance(l, list):
        raise DecodeError(f"expected a block list, got {type(l).__name__}", entity=entity, value=l)
    if len(l) > 1:
        raise DecodeError(f"expected at most one block, got {len(l)}", entity=entity, value=l)
    if len(l) == 0 or l[0] is None:
        return None
    block = l[0]
    if not isinstance(block, dict):
        raise DecodeError(f"expected a mapping, got {type(block).__name__}", entity=entity, value=block)
    return block


def block_list(l: Optional[List[Any]], entity: Optional[str] = None) -> List[Block]:
    """Return the mappings of a repeated block, skipping ``None`` entries.

    Raises:
        DecodeError: If the value is not a list of mappings
    """
    if l is None:
        return []
    if not isinstance(l, list):
        raise DecodeError(f"expected a list, got {type(l).__name__}", entity=entity, value=l)

    blocks = []
    for i, item in enumerate(l):
        if item is None:
            continue
        if not isinstance(item, dict):
            raise DecodeError(
                f"expected a mapping, got {type(item).__name__}", entity=f"{entity or ''}[{i}]", value=item
            )
        blocks.append(item)
    return blocks


def has_block(m: Block, key: str) -> bool:
    """Check whether a mapping holds a set (non-empty) nested block."""
    value = m.get(key)
    return isinstance(value, list) and any(item is not None for item in value)


def expand_each(
    l: Optional[List[Any]], entity: str, expand: Callable[[Block], T]
) -> List[T]:
    """Expand every mapping of a repeated block.

    Decode errors raised by ``expand`` are re-raised with the element index,
    e.g. ``items[1].mode``.

    Args:
        l: Repeated block list
        entity: Name of the repeated block
        expand: Function decoding a single mapping

    Returns:
        List of decoded elements, in input order
    """
    result = []
    for i, block in enumerate(block_list(l, entity)):
        try:
            result.append(expand(block))
        except DecodeError as e:
            raise e.within(f"{entity}[{i}]") from e
    return result


def expand_nested(m: Block, key: str, expand: Callable[[Block], T]) -> Optional[T]:
    """Expand a nested singleton block, or return None when it is unset."""
    block = first_block(m.get(key), key)
    if block is None:
        return None
    try:
        return expand(block)
    except DecodeError as e:
        raise e.within(key) from e
