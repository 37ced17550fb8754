"""
kubeshape: typed <-> dynamic mapping for Kubernetes workload objects

Converts between nested, string-keyed configuration trees (dicts, lists and
scalars) and the typed models of the Kubernetes Python client, preserving
optionality and surviving round trips in both directions.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
