"""Dynamic tree documents backed by YAML.

This module provides the TreeDocument class that holds named top-level blocks
of a dynamic tree, as a configuration system would hand them over, and loads
or dumps them as YAML using ruamel.yaml.
"""

from dataclasses import dataclass
from io import StringIO
from pathlib import Path
from typing import Any, Dict, List

from ruamel.yaml import YAML

from kubeshape.core.errors import DecodeError


def _create_yaml_instance() -> YAML:
    """Create configured ruamel.yaml instance for dynamic tree documents.

    Returns:
        YAML instance configured to:
        - Not wrap long strings (keeps credential-spec blobs on one line)
        - Use block style (not flow style)
    """
    yaml = YAML()
    yaml.width = 4096
    yaml.default_flow_style = False
    yaml.allow_unicode = True
    return yaml


def to_plain(node: Any) -> Any:
    """Convert ruamel.yaml containers and scalars to plain Python data.

    Mappings become dicts, sequences become lists and string subclasses
    (quoted or block scalars) become str. Ints and bools are kept.
    """
    if isinstance(node, dict):
        return {str(k): to_plain(v) for k, v in node.items()}
    if isinstance(node, (list, tuple)):
        return [to_plain(v) for v in node]
    if isinstance(node, bool) or node is None:
        return node
    if isinstance(node, str):
        return str(node)
    if isinstance(node, int):
        return int(node)
    return node


@dataclass(frozen=True)
class TreeDocument:
    """Named top-level blocks of a dynamic attribute tree.

    Attributes:
        blocks: Mapping from block name to its dynamic value.
                Example: ``{"empty_dir": [{"medium": "Memory"}]}``

    Example:
        >>> doc = TreeDocument.from_yaml('''
        ... secret:
        ... - secret_name: secret1
        ...   default_mode: "0644"
        ... ''')
        >>> doc.get("secret")
        [{'secret_name': 'secret1', 'default_mode': '0644'}]
    """
    blocks: Dict[str, Any]

    def to_serializable(self) -> Dict[str, Any]:
        """Return the blocks as JSON-serializable data."""
        return {"blocks": self.blocks}

    def get(self, name: str) -> List[Any]:
        """Return a block by name, or an empty list when it is missing."""
        value = self.blocks.get(name)
        if value is None:
            return []
        return value

    def with_block(self, name: str, value: List[Any]) -> "TreeDocument":
        """Return a new document with one block replaced (original unchanged)."""
        blocks = dict(self.blocks)
        blocks[name] = value
        return TreeDocument(blocks=blocks)

    def to_yaml(self) -> str:
        """Dump the document as YAML text."""
        yaml = _create_yaml_instance()
        stream = StringIO()
        yaml.dump(self.blocks, stream)
        return stream.getvalue()

    def write_to_file(self, file_path: str) -> None:
        """Write the document as YAML, creating parent directories."""
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_yaml(), encoding="utf-8")

    @classmethod
    def from_yaml(cls, content: str) -> "TreeDocument":
        """Load a document from YAML text.

        Raises:
            DecodeError: If the top level is not a mapping
        """
        yaml = _create_yaml_instance()
        data = yaml.load(content)
        if data is None:
            return cls(blocks={})
        if not isinstance(data, dict):
            raise DecodeError(f"expected a mapping at the document root, got {type(data).__name__}")
        return cls(blocks=to_plain(data))

    @classmethod
    def from_file(cls, file_path: str) -> "TreeDocument":
        """Load a document from a YAML file.

        Example:
            >>> doc = TreeDocument.from_file("volumes.yaml")
        """
        path = Path(file_path)
        return cls.from_yaml(path.read_text(encoding="utf-8"))
