"""Toleration flatten/expand.

Tolerations are a repeated block: each toleration is one mapping in a plain
list, so an empty sequence flattens to ``[]`` rather than a singleton block.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from kubernetes.client import V1Toleration

from kubeshape.core.codecs import format_int, get_int, get_str
from kubeshape.core.errors import DecodeError
from kubeshape.core.schema.tree import block_list

logger = logging.getLogger(__name__)


def flatten_tolerations(tolerations: Optional[Sequence[V1Toleration]]) -> List[Dict[str, Any]]:
    """Flatten tolerations into a list of mappings.

    Each mapping holds only the fields set on its toleration: ``key``,
    ``value``, ``operator`` and ``effect`` are omitted when empty, and
    ``toleration_seconds`` is rendered as decimal text when set.

    Args:
        tolerations: Typed tolerations (None is treated as empty)

    Returns:
        List with one mapping per toleration, in input order

    Example:
        >>> flatten_tolerations([V1Toleration(effect="NoExecute", toleration_seconds=120)])
        [{'effect': 'NoExecute', 'toleration_seconds': '120'}]
    """
    result = []
    for t in tolerations or []:
        obj = {}
        if t.effect:
            obj["effect"] = t.effect
        if t.key:
            obj["key"] = t.key
        if t.operator:
            obj["operator"] = t.operator
        if t.toleration_seconds is not None:
            obj["toleration_seconds"] = format_int(t.toleration_seconds)
        if t.value:
            obj["value"] = t.value
        result.append(obj)
    return result


def expand_tolerations(l: Optional[List[Any]]) -> List[V1Toleration]:
    """Expand a list of toleration mappings.

    Keys that are missing or empty leave the corresponding field unset.

    Args:
        l: Dynamic list of toleration mappings

    Returns:
        List of V1Toleration, in input order

    Raises:
        DecodeError: If ``toleration_seconds`` is not a decimal integer. The
            error names the offending toleration and no partial list is returned.
    """
    result = []
    for i, m in enumerate(block_list(l, "toleration")):
        try:
            result.append(_expand_toleration(m))
        except DecodeError as e:
            logger.debug(f"Failed to expand toleration {i}: {e}")
            raise e.within(f"toleration[{i}]") from e
    return result


def _expand_toleration(m: Dict[str, Any]) -> V1Toleration:
    return V1Toleration(
        effect=get_str(m, "effect"),
        key=get_str(m, "key"),
        operator=get_str(m, "operator"),
        toleration_seconds=get_int(m, "toleration_seconds"),
        value=get_str(m, "value"),
    )
