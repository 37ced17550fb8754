"""K8s constants used across mapping modules.

This module contains constants that are shared across multiple mapping modules
to avoid circular import issues.
"""

# emptyDir storage media
STORAGE_MEDIUM_DEFAULT = ""
STORAGE_MEDIUM_MEMORY = "Memory"
STORAGE_MEDIUM_HUGE_PAGES = "HugePages"

# Projection variant keys, in the order they are rendered
PROJECTION_SECRET = "secret"
PROJECTION_CONFIG_MAP = "config_map"
PROJECTION_DOWNWARD_API = "downward_api"
PROJECTION_SERVICE_ACCOUNT_TOKEN = "service_account_token"
PROJECTION_CLUSTER_TRUST_BUNDLE = "cluster_trust_bundle"

PROJECTION_VARIANTS = (
    PROJECTION_SECRET,
    PROJECTION_CONFIG_MAP,
    PROJECTION_DOWNWARD_API,
    PROJECTION_SERVICE_ACCOUNT_TOKEN,
    PROJECTION_CLUSTER_TRUST_BUNDLE,
)

# Volume source keys handled by flatten_volumes/expand_volumes
VOLUME_SOURCES = (
    "secret",
    "config_map",
    "empty_dir",
    "csi",
    "downward_api",
    "projected",
)
