"""Kubernetes (K8s) workload object mappings for kubeshape.

This module provides flatten/expand pairs between dynamic attribute trees and
the typed models of the Kubernetes Python client:
- Tolerations
- Volume sources: Secret, ConfigMap, EmptyDir, CSI, DownwardAPI, Projected
- Windows security-context options
- Pod volume lists
"""

from kubeshape.k8s.pod import expand_volumes, flatten_volumes
from kubeshape.k8s.projected import expand_projected_volume_source, flatten_projected_volume_source
from kubeshape.k8s.security_context import expand_windows_options, flatten_windows_options
from kubeshape.k8s.tolerations import expand_tolerations, flatten_tolerations
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

__all__ = [
    "expand_config_map_volume_source",
    "expand_csi_volume_source",
    "expand_downward_api_volume_source",
    "expand_empty_dir_volume_source",
    "expand_projected_volume_source",
    "expand_secret_volume_source",
    "expand_tolerations",
    "expand_volumes",
    "expand_windows_options",
    "flatten_config_map_volume_source",
    "flatten_csi_volume_source",
    "flatten_downward_api_volume_source",
    "flatten_empty_dir_volume_source",
    "flatten_projected_volume_source",
    "flatten_secret_volume_source",
    "flatten_tolerations",
    "flatten_volumes",
    "flatten_windows_options",
]
