"""Windows security-context options flatten/expand."""

import logging
from typing import Any, Dict, List, Optional

from kubernetes.client import V1WindowsSecurityContextOptions

from kubeshape.core.codecs import get_bool, get_str
from kubeshape.core.errors import DecodeError
from kubeshape.core.schema.tree import first_block

logger = logging.getLogger(__name__)


def flatten_windows_options(options: Optional[V1WindowsSecurityContextOptions]) -> List[Dict[str, Any]]:
    """Flatten WindowsSecurityContextOptions into a singleton block.

    The block is always rendered, even when no option is set, so
    ``V1WindowsSecurityContextOptions()`` (or None) flattens to ``[{}]``.
    Each option is rendered when it is set. The credential spec is a JSON
    document and is copied verbatim.

    Args:
        options: Typed options (None is treated as all unset)

    Returns:
        Singleton block with the set options
    """
    att = {}
    if options is None:
        return [att]
    if options.gmsa_credential_spec is not None:
        att["gmsa_credential_spec"] = options.gmsa_credential_spec
    if options.gmsa_credential_spec_name is not None:
        att["gmsa_credential_spec_name"] = options.gmsa_credential_spec_name
    if options.host_process is not None:
        att["host_process"] = options.host_process
    if options.run_as_user_name is not None:
        att["run_as_username"] = options.run_as_user_name
    return [att]


def expand_windows_options(l: Optional[List[Any]]) -> V1WindowsSecurityContextOptions:
    """Expand a WindowsSecurityContextOptions block.

    An empty string means the option is absent, not set to empty: a block
    whose string options are all ``""`` expands to the same fully-unset
    object as ``[]`` or None. ``host_process`` is set whenever the key holds
    a bool, including False.

    Args:
        l: Singleton block list

    Returns:
        V1WindowsSecurityContextOptions with only the given options set

    Raises:
        DecodeError: If ``host_process`` holds a non-boolean value
    """
    try:
        m = first_block(l)
        if m is None:
            return V1WindowsSecurityContextOptions()
        return V1WindowsSecurityContextOptions(
            gmsa_credential_spec=get_str(m, "gmsa_credential_spec"),
            gmsa_credential_spec_name=get_str(m, "gmsa_credential_spec_name"),
            host_process=get_bool(m, "host_process"),
            run_as_user_name=get_str(m, "run_as_username"),
        )
    except DecodeError as e:
        logger.debug(f"Failed to expand windows options: {e}")
        raise e.within("windows_options") from e
