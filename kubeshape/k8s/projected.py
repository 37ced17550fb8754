"""Projected volume source flatten/expand.

A projected volume holds an ordered list of projections. Each projection is a
tagged union over five variants, and exactly one of them is populated per
element:

- ``secret``: V1SecretProjection
- ``config_map``: V1ConfigMapProjection
- ``downward_api``: V1DownwardAPIProjection
- ``service_account_token``: V1ServiceAccountTokenProjection
- ``cluster_trust_bundle``: V1ClusterTrustBundleProjection

The variant key doubles as the attribute name on V1VolumeProjection, so both
directions dispatch through the same table.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from kubernetes.client import (
    V1ClusterTrustBundleProjection,
    V1ConfigMapProjection,
    V1DownwardAPIProjection,
    V1LabelSelector,
    V1LabelSelectorRequirement,
    V1ProjectedVolumeSource,
    V1SecretProjection,
    V1ServiceAccountTokenProjection,
    V1VolumeProjection,
)

from kubeshape.core.codecs import (
    format_int,
    format_mode,
    get_bool,
    get_int,
    get_mode,
    get_required_str,
    get_str,
    parse_str,
)
from kubeshape.core.config import DEFAULT_OPTIONS, MappingOptions
from kubeshape.core.errors import DecodeError
from kubeshape.core.schema.tree import block_list, expand_nested, first_block, has_block
from kubeshape.k8s.constants import (
    PROJECTION_CLUSTER_TRUST_BUNDLE,
    PROJECTION_CONFIG_MAP,
    PROJECTION_DOWNWARD_API,
    PROJECTION_SECRET,
    PROJECTION_SERVICE_ACCOUNT_TOKEN,
    PROJECTION_VARIANTS,
)
from kubeshape.k8s.volumes import (
    expand_downward_api_items,
    expand_key_to_path,
    flatten_downward_api_items,
    flatten_key_to_path,
)

logger = logging.getLogger(__name__)


# Secret and ConfigMap projections share one field set.


def _flatten_object_projection(p: Any) -> Dict[str, Any]:
    att = {}
    if p.name:
        att["name"] = p.name
    if p.items:
        att["items"] = flatten_key_to_path(p.items)
    if p.optional is not None:
        att["optional"] = p.optional
    return att


def _expand_secret_projection(m: Dict[str, Any]) -> V1SecretProjection:
    return V1SecretProjection(
        items=expand_key_to_path(m.get("items")),
        name=get_str(m, "name"),
        optional=get_bool(m, "optional"),
    )


def _expand_config_map_projection(m: Dict[str, Any]) -> V1ConfigMapProjection:
    return V1ConfigMapProjection(
        items=expand_key_to_path(m.get("items")),
        name=get_str(m, "name"),
        optional=get_bool(m, "optional"),
    )


def _flatten_downward_api_projection(p: V1DownwardAPIProjection) -> Dict[str, Any]:
    att = {}
    if p.items:
        att["items"] = flatten_downward_api_items(p.items)
    return att


def _expand_downward_api_projection(m: Dict[str, Any]) -> V1DownwardAPIProjection:
    return V1DownwardAPIProjection(items=expand_downward_api_items(m.get("items")))


def _flatten_service_account_token_projection(p: V1ServiceAccountTokenProjection) -> Dict[str, Any]:
    att = {}
    if p.audience:
        att["audience"] = p.audience
    if p.expiration_seconds is not None:
        att["expiration_seconds"] = format_int(p.expiration_seconds)
    if p.path:
        att["path"] = p.path
    return att


def _expand_service_account_token_projection(m: Dict[str, Any]) -> V1ServiceAccountTokenProjection:
    return V1ServiceAccountTokenProjection(
        audience=get_str(m, "audience"),
        expiration_seconds=get_int(m, "expiration_seconds"),
        path=get_required_str(m, "path"),
    )


def flatten_label_selector(selector: V1LabelSelector) -> List[Dict[str, Any]]:
    """Flatten a label selector into a singleton block."""
    att = {}
    if selector.match_labels:
        att["match_labels"] = dict(selector.match_labels)
    if selector.match_expressions:
        expressions = []
        for req in selector.match_expressions:
            expr = {"key": req.key or "", "operator": req.operator or ""}
            if req.values:
                expr["values"] = list(req.values)
            expressions.append(expr)
        att["match_expressions"] = expressions
    return [att]


def _expand_label_selector(m: Dict[str, Any]) -> V1LabelSelector:
    match_labels = m.get("match_labels") or None
    if match_labels is not None:
        if not isinstance(match_labels, dict):
            raise DecodeError(f"expected a mapping, got {match_labels!r}", field="match_labels", value=match_labels)
        match_labels = {str(k): parse_str(v, "match_labels") for k, v in match_labels.items()}

    expressions = []
    for i, expr in enumerate(block_list(m.get("match_expressions"), "match_expressions")):
        field = f"match_expressions[{i}].values"
        values = expr.get("values")
        if values is not None and not isinstance(values, list):
            raise DecodeError(f"expected a list of strings, got {values!r}", field=field, value=values)
        values = [parse_str(v, field) for v in values or []] or None
        expressions.append(
            V1LabelSelectorRequirement(
                key=get_required_str(expr, "key"),
                operator=get_required_str(expr, "operator"),
                values=values,
            )
        )

    return V1LabelSelector(match_expressions=expressions or None, match_labels=match_labels)


def _flatten_cluster_trust_bundle_projection(p: V1ClusterTrustBundleProjection) -> Dict[str, Any]:
    att = {}
    if p.name:
        att["name"] = p.name
    if p.signer_name:
        att["signer_name"] = p.signer_name
    if p.label_selector is not None:
        att["label_selector"] = flatten_label_selector(p.label_selector)
    if p.optional is not None:
        att["optional"] = p.optional
    if p.path:
        att["path"] = p.path
    return att


def _expand_cluster_trust_bundle_projection(m: Dict[str, Any]) -> V1ClusterTrustBundleProjection:
    return V1ClusterTrustBundleProjection(
        label_selector=expand_nested(m, "label_selector", _expand_label_selector),
        name=get_str(m, "name"),
        optional=get_bool(m, "optional"),
        path=get_required_str(m, "path"),
        signer_name=get_str(m, "signer_name"),
    )


_VARIANTS: Dict[str, Tuple[Callable[[Any], Dict[str, Any]], Callable[[Dict[str, Any]], Any]]] = {
    PROJECTION_SECRET: (_flatten_object_projection, _expand_secret_projection),
    PROJECTION_CONFIG_MAP: (_flatten_object_projection, _expand_config_map_projection),
    PROJECTION_DOWNWARD_API: (_flatten_downward_api_projection, _expand_downward_api_projection),
    PROJECTION_SERVICE_ACCOUNT_TOKEN: (
        _flatten_service_account_token_projection,
        _expand_service_account_token_projection,
    ),
    PROJECTION_CLUSTER_TRUST_BUNDLE: (
        _flatten_cluster_trust_bundle_projection,
        _expand_cluster_trust_bundle_projection,
    ),
}


def flatten_volume_projection(projection: V1VolumeProjection) -> Dict[str, Any]:
    """Flatten one projection element.

    Only the populated variant is rendered, as a singleton block under its
    variant key; the other keys are omitted.
    """
    att = {}
    for variant in PROJECTION_VARIANTS:
        value = getattr(projection, variant, None)
        if value is None:
            continue
        flatten, _ = _VARIANTS[variant]
        att[variant] = [flatten(value)]
    return att


def expand_volume_projection(
    m: Dict[str, Any], options: MappingOptions = DEFAULT_OPTIONS
) -> V1VolumeProjection:
    """Expand one projection element.

    Args:
        m: Projection mapping with one variant key
        options: Mapping options; ``strict_projections`` decides whether an
            element with zero or several variants is an error

    Returns:
        V1VolumeProjection with the matching variant populated

    Raises:
        DecodeError: If strict and the element does not hold exactly one variant
    """
    present = [variant for variant in PROJECTION_VARIANTS if has_block(m, variant)]

    if len(present) != 1:
        if options.strict_projections:
            if present:
                message = f"projection sets several variants: {', '.join(present)}"
            else:
                message = f"projection sets none of: {', '.join(PROJECTION_VARIANTS)}"
            raise DecodeError(message, value=m)
        logger.debug(f"Lenient projection expansion with variants {present}")

    kwargs = {}
    for variant in present:
        _, expand = _VARIANTS[variant]
        kwargs[variant] = expand_nested(m, variant, expand)
    return V1VolumeProjection(**kwargs)


def flatten_projected_volume_source(source: V1ProjectedVolumeSource) -> List[Dict[str, Any]]:
    """Flatten a ProjectedVolumeSource.

    Example:
        >>> source = V1ProjectedVolumeSource(sources=[
        ...     V1VolumeProjection(secret=V1SecretProjection(name="secret-1")),
        ... ])
        >>> flatten_projected_volume_source(source)
        [{'sources': [{'secret': [{'name': 'secret-1'}]}]}]
    """
    att = {}
    if source.default_mode is not None:
        att["default_mode"] = format_mode(source.default_mode)
    if source.sources:
        att["sources"] = [flatten_volume_projection(p) for p in source.sources]
    return [att]


def expand_projected_volume_source(
    l: Optional[List[Any]], options: Optional[MappingOptions] = None
) -> V1ProjectedVolumeSource:
    """Expand a ProjectedVolumeSource block, preserving projection order.

    Args:
        l: Singleton block list
        options: Mapping options (defaults to MappingOptions())

    Returns:
        V1ProjectedVolumeSource; an unset block gives an empty source

    Raises:
        DecodeError: If a mode is invalid or a projection element is malformed
    """
    options = options or DEFAULT_OPTIONS
    try:
        m = first_block(l)
        if m is None:
            return V1ProjectedVolumeSource()

        sources = []
        for i, element in enumerate(block_list(m.get("sources"), "sources")):
            try:
                sources.append(expand_volume_projection(element, options))
            except DecodeError as e:
                raise e.within(f"sources[{i}]") from e

        return V1ProjectedVolumeSource(
            default_mode=get_mode(m, "default_mode"),
            sources=sources or None,
        )
    except DecodeError as e:
        logger.debug(f"Failed to expand projected volume source: {e}")
        raise e.within("projected") from e
