"""Volume source flatten/expand: Secret, ConfigMap, EmptyDir, CSI and DownwardAPI.

Every volume source is a singleton block: flatten returns a one-element list,
and expand accepts ``[]``, ``None`` or ``[None]`` as an unset block and returns
a zero-valued typed object for it.

Whether an unset field is omitted or rendered as its zero value is decided
field by field:

- Secret omits ``secret_name``, ``default_mode``, ``items`` and ``optional``
  when unset, so a zero value flattens to ``[{}]``.
- ConfigMap always renders ``name`` (``""`` when unset): ``[{"name": ""}]``.
- EmptyDir always renders ``medium`` (``""`` when unset): ``[{"medium": ""}]``.
- CSI always renders ``driver`` and omits ``read_only``, ``fs_type`` and
  ``node_publish_secret_ref`` when unset.
"""

import functools
import logging
from typing import Any, Dict, List, Optional

from kubernetes.client import (
    V1ConfigMapVolumeSource,
    V1CSIVolumeSource,
    V1DownwardAPIVolumeFile,
    V1DownwardAPIVolumeSource,
    V1EmptyDirVolumeSource,
    V1KeyToPath,
    V1LocalObjectReference,
    V1ObjectFieldSelector,
    V1ResourceFieldSelector,
    V1SecretVolumeSource,
)

from kubeshape.core import quantity
from kubeshape.core.codecs import (
    format_mode,
    get_bool,
    get_mode,
    get_required_str,
    get_str,
    get_string_map,
)
from kubeshape.core.errors import DecodeError
from kubeshape.core.schema.tree import expand_each, expand_nested, first_block
from kubeshape.k8s.constants import STORAGE_MEDIUM_DEFAULT

logger = logging.getLogger(__name__)


def _expanding(entity: str):
    """Decorate an expander so its decode errors name ``entity``."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(l):
            try:
                return func(l)
            except DecodeError as e:
                logger.debug(f"Failed to expand {entity}: {e}")
                raise e.within(entity) from e

        return wrapper

    return decorator


def flatten_quantity(value: str) -> str:
    """Render a typed quantity in canonical form.

    Typed objects are assumed valid, so an unparsable quantity is passed
    through verbatim rather than failing the flatten.
    """
    try:
        return quantity.canonicalize(value)
    except DecodeError as e:
        logger.warning(f"Passing through non-canonical quantity {value!r}: {e}")
        return value


def expand_quantity(m: Dict[str, Any], key: str) -> Optional[str]:
    """Read an optional quantity field and return its canonical text."""
    value = m.get(key)
    if value is None or value == "":
        return None
    try:
        return quantity.canonicalize(value)
    except DecodeError as e:
        raise DecodeError(e.message, field=key, value=value) from e


# Key-to-path items


def flatten_key_to_path(items: Optional[List[V1KeyToPath]]) -> List[Dict[str, Any]]:
    """Flatten key-to-path items; ``mode`` is rendered as octal text."""
    result = []
    for item in items or []:
        obj = {}
        if item.key:
            obj["key"] = item.key
        if item.mode is not None:
            obj["mode"] = format_mode(item.mode)
        if item.path:
            obj["path"] = item.path
        result.append(obj)
    return result


def expand_key_to_path(l: Optional[List[Any]]) -> Optional[List[V1KeyToPath]]:
    """Expand key-to-path items; an empty list leaves the field unset."""
    items = expand_each(l, "items", _expand_key_to_path)
    return items or None


def _expand_key_to_path(m: Dict[str, Any]) -> V1KeyToPath:
    return V1KeyToPath(
        key=get_required_str(m, "key"),
        mode=get_mode(m, "mode"),
        path=get_required_str(m, "path"),
    )


# Local object references


def flatten_local_object_reference(ref: V1LocalObjectReference) -> List[Dict[str, Any]]:
    return [{"name": ref.name or ""}]


def _expand_local_object_reference(m: Dict[str, Any]) -> V1LocalObjectReference:
    return V1LocalObjectReference(name=get_str(m, "name"))


# Secret


def flatten_secret_volume_source(source: V1SecretVolumeSource) -> List[Dict[str, Any]]:
    """Flatten a SecretVolumeSource.

    Every field is omitted when unset, so ``V1SecretVolumeSource()`` flattens
    to ``[{}]``.

    Example:
        >>> flatten_secret_volume_source(V1SecretVolumeSource(secret_name="s1", default_mode=0o644))
        [{'default_mode': '0644', 'secret_name': 's1'}]
    """
    att = {}
    if source.default_mode is not None:
        att["default_mode"] = format_mode(source.default_mode)
    if source.secret_name:
        att["secret_name"] = source.secret_name
    if source.items:
        att["items"] = flatten_key_to_path(source.items)
    if source.optional is not None:
        att["optional"] = source.optional
    return [att]


@_expanding("secret")
def expand_secret_volume_source(l: Optional[List[Any]]) -> V1SecretVolumeSource:
    """Expand a SecretVolumeSource block.

    Raises:
        DecodeError: If a mode is not octal text or ``optional`` is not a bool
    """
    m = first_block(l)
    if m is None:
        return V1SecretVolumeSource()
    return V1SecretVolumeSource(
        default_mode=get_mode(m, "default_mode"),
        items=expand_key_to_path(m.get("items")),
        optional=get_bool(m, "optional"),
        secret_name=get_str(m, "secret_name"),
    )


# ConfigMap


def flatten_config_map_volume_source(source: V1ConfigMapVolumeSource) -> List[Dict[str, Any]]:
    """Flatten a ConfigMapVolumeSource.

    ``name`` is always rendered, as ``""`` when unset; the other fields are
    omitted when unset.
    """
    att = {"name": source.name or ""}
    if source.default_mode is not None:
        att["default_mode"] = format_mode(source.default_mode)
    if source.items:
        att["items"] = flatten_key_to_path(source.items)
    if source.optional is not None:
        att["optional"] = source.optional
    return [att]


@_expanding("config_map")
def expand_config_map_volume_source(l: Optional[List[Any]]) -> V1ConfigMapVolumeSource:
    """Expand a ConfigMapVolumeSource block; an empty ``name`` means unset."""
    m = first_block(l)
    if m is None:
        return V1ConfigMapVolumeSource()
    return V1ConfigMapVolumeSource(
        default_mode=get_mode(m, "default_mode"),
        items=expand_key_to_path(m.get("items")),
        name=get_str(m, "name"),
        optional=get_bool(m, "optional"),
    )


# EmptyDir


def flatten_empty_dir_volume_source(source: V1EmptyDirVolumeSource) -> List[Dict[str, Any]]:
    """Flatten an EmptyDirVolumeSource.

    ``medium`` is always rendered; ``size_limit`` only when set, in canonical
    quantity form.
    """
    att = {"medium": source.medium or STORAGE_MEDIUM_DEFAULT}
    if source.size_limit is not None:
        att["size_limit"] = flatten_quantity(source.size_limit)
    return [att]


@_expanding("empty_dir")
def expand_empty_dir_volume_source(l: Optional[List[Any]]) -> V1EmptyDirVolumeSource:
    """Expand an EmptyDirVolumeSource block.

    Raises:
        DecodeError: If ``size_limit`` is not a valid quantity
    """
    m = first_block(l)
    if m is None:
        return V1EmptyDirVolumeSource()
    return V1EmptyDirVolumeSource(
        medium=get_str(m, "medium"),
        size_limit=expand_quantity(m, "size_limit"),
    )


# CSI


def flatten_csi_volume_source(source: V1CSIVolumeSource) -> List[Dict[str, Any]]:
    """Flatten a CSIVolumeSource.

    ``volume_attributes`` is copied verbatim; values may hold multi-line
    structured text and are not reformatted. ``read_only``, ``fs_type`` and
    ``node_publish_secret_ref`` are omitted when unset.
    """
    att = {"driver": source.driver or ""}
    if source.volume_attributes:
        att["volume_attributes"] = dict(source.volume_attributes)
    if source.read_only is not None:
        att["read_only"] = source.read_only
    if source.fs_type is not None:
        att["fs_type"] = source.fs_type
    if source.node_publish_secret_ref is not None:
        att["node_publish_secret_ref"] = flatten_local_object_reference(source.node_publish_secret_ref)
    return [att]


@_expanding("csi")
def expand_csi_volume_source(l: Optional[List[Any]]) -> V1CSIVolumeSource:
    """Expand a CSIVolumeSource block.

    ``read_only`` and ``fs_type`` are set only when their keys are present.
    An unset block gives a source with an empty driver.
    """
    m = first_block(l)
    if m is None:
        return V1CSIVolumeSource(driver="")
    return V1CSIVolumeSource(
        driver=get_required_str(m, "driver"),
        fs_type=get_str(m, "fs_type"),
        node_publish_secret_ref=expand_nested(m, "node_publish_secret_ref", _expand_local_object_reference),
        read_only=get_bool(m, "read_only"),
        volume_attributes=get_string_map(m, "volume_attributes"),
    )


# DownwardAPI


def flatten_downward_api_items(items: Optional[List[V1DownwardAPIVolumeFile]]) -> List[Dict[str, Any]]:
    """Flatten downward API volume files (shared with projected sources)."""
    result = []
    for item in items or []:
        obj = {}
        if item.path:
            obj["path"] = item.path
        if item.mode is not None:
            obj["mode"] = format_mode(item.mode)
        if item.field_ref is not None:
            ref = {"field_path": item.field_ref.field_path or ""}
            if item.field_ref.api_version:
                ref["api_version"] = item.field_ref.api_version
            obj["field_ref"] = [ref]
        if item.resource_field_ref is not None:
            res = {"resource": item.resource_field_ref.resource or ""}
            if item.resource_field_ref.container_name:
                res["container_name"] = item.resource_field_ref.container_name
            if item.resource_field_ref.divisor is not None:
                res["divisor"] = flatten_quantity(item.resource_field_ref.divisor)
            obj["resource_field_ref"] = [res]
        result.append(obj)
    return result


def expand_downward_api_items(l: Optional[List[Any]]) -> Optional[List[V1DownwardAPIVolumeFile]]:
    """Expand downward API volume files; an empty list leaves the field unset."""
    items = expand_each(l, "items", _expand_downward_api_item)
    return items or None


def _expand_downward_api_item(m: Dict[str, Any]) -> V1DownwardAPIVolumeFile:
    return V1DownwardAPIVolumeFile(
        field_ref=expand_nested(m, "field_ref", _expand_object_field_selector),
        mode=get_mode(m, "mode"),
        path=get_required_str(m, "path"),
        resource_field_ref=expand_nested(m, "resource_field_ref", _expand_resource_field_selector),
    )


def _expand_object_field_selector(m: Dict[str, Any]) -> V1ObjectFieldSelector:
    return V1ObjectFieldSelector(
        api_version=get_str(m, "api_version"),
        field_path=get_required_str(m, "field_path"),
    )


def _expand_resource_field_selector(m: Dict[str, Any]) -> V1ResourceFieldSelector:
    return V1ResourceFieldSelector(
        container_name=get_str(m, "container_name"),
        divisor=expand_quantity(m, "divisor"),
        resource=get_required_str(m, "resource"),
    )


def flatten_downward_api_volume_source(source: V1DownwardAPIVolumeSource) -> List[Dict[str, Any]]:
    att = {}
    if source.default_mode is not None:
        att["default_mode"] = format_mode(source.default_mode)
    if source.items:
        att["items"] = flatten_downward_api_items(source.items)
    return [att]


@_expanding("downward_api")
def expand_downward_api_volume_source(l: Optional[List[Any]]) -> V1DownwardAPIVolumeSource:
    m = first_block(l)
    if m is None:
        return V1DownwardAPIVolumeSource()
    return V1DownwardAPIVolumeSource(
        default_mode=get_mode(m, "default_mode"),
        items=expand_downward_api_items(m.get("items")),
    )
