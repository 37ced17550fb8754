"""Pod volume list flatten/expand.

Each volume is a mapping with its ``name`` and one source block, keyed by
the source type:

    [{"name": "config", "config_map": [{"name": "app-config"}]}]

Sources are dispatched to the per-entity functions in
``kubeshape.k8s.volumes`` and ``kubeshape.k8s.projected``.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from kubernetes.client import V1Volume

from kubeshape.core.codecs import get_required_str
from kubeshape.core.config import DEFAULT_OPTIONS, MappingOptions
from kubeshape.core.errors import DecodeError
from kubeshape.core.schema.tree import block_list, has_block
from kubeshape.k8s.constants import VOLUME_SOURCES
from kubeshape.k8s.projected import expand_projected_volume_source, flatten_projected_volume_source
from kubeshape.k8s.volumes import (
    expand_config_map_volume_source,
    expand_csi_volume_source,
    expand_downward_api_volume_source,
    expand_empty_dir_volume_source,
    expand_secret_volume_source,
    flatten_config_map_volume_source,
    flatten_csi_volume_source,
    flatten_downward_api_volume_source,
    flatten_empty_dir_volume_source,
    flatten_secret_volume_source,
)

logger = logging.getLogger(__name__)

_SOURCES: Dict[str, Tuple[Callable[[Any], List[Dict[str, Any]]], Callable[..., Any]]] = {
    "secret": (flatten_secret_volume_source, expand_secret_volume_source),
    "config_map": (flatten_config_map_volume_source, expand_config_map_volume_source),
    "empty_dir": (flatten_empty_dir_volume_source, expand_empty_dir_volume_source),
    "csi": (flatten_csi_volume_source, expand_csi_volume_source),
    "downward_api": (flatten_downward_api_volume_source, expand_downward_api_volume_source),
    "projected": (flatten_projected_volume_source, expand_projected_volume_source),
}


def flatten_volumes(volumes: Optional[Sequence[V1Volume]]) -> List[Dict[str, Any]]:
    """Flatten pod volumes.

    Sources other than the ones this package maps are left out; such a
    volume is rendered with its name only.

    Args:
        volumes: Typed volumes (None is treated as empty)

    Returns:
        One mapping per volume, in input order
    """
    result = []
    for volume in volumes or []:
        att = {"name": volume.name}
        for source in VOLUME_SOURCES:
            value = getattr(volume, source, None)
            if value is None:
                continue
            flatten, _ = _SOURCES[source]
            att[source] = flatten(value)
        if len(att) == 1:
            logger.debug(f"Volume {volume.name!r} has no mapped source, rendering name only")
        result.append(att)
    return result


def expand_volumes(
    l: Optional[List[Any]], options: MappingOptions = DEFAULT_OPTIONS
) -> List[V1Volume]:
    """Expand pod volumes.

    Args:
        l: Dynamic list of volume mappings
        options: Mapping options passed to the projected expander

    Returns:
        List of V1Volume, in input order

    Raises:
        DecodeError: If a volume sets more than one source, or a source fails
            to decode. The error names the volume by index.
    """
    result = []
    for i, m in enumerate(block_list(l, "volume")):
        try:
            result.append(_expand_volume(m, options))
        except DecodeError as e:
            raise e.within(f"volume[{i}]") from e
    return result


def _expand_volume(m: Dict[str, Any], options: MappingOptions) -> V1Volume:
    present = [source for source in VOLUME_SOURCES if has_block(m, source)]
    if len(present) > 1:
        raise DecodeError(f"volume sets several sources: {', '.join(present)}", value=m)

    kwargs = {"name": get_required_str(m, "name")}
    for source in present:
        _, expand = _SOURCES[source]
        if source == "projected":
            kwargs[source] = expand(m[source], options)
        else:
            kwargs[source] = expand(m[source])
    return V1Volume(**kwargs)
