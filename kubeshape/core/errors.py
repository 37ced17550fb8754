"""Mapping-specific exceptions for error handling."""

from typing import Any, Optional


class DecodeError(ValueError):
    """Raised when a dynamic tree value cannot be decoded into a typed field.

    Only expand functions raise this exception. It is raised for values such
    as a non-numeric string where an integer is required, an invalid quantity,
    or a projection element that does not hold exactly one variant.

    The error carries enough context to localize the fault: the entity being
    expanded and the path of the offending field inside it. Callers decide
    whether to propagate or report it; the mapping layer never retries.

    Attributes:
        message: Description of the failure
        entity: Name of the entity being expanded (e.g., "toleration[0]")
        field: Field path inside the entity (e.g., "toleration_seconds")
        value: The offending dynamic value (optional)
    """

    def __init__(
        self,
        message: str,
        entity: Optional[str] = None,
        field: Optional[str] = None,
        value: Optional[Any] = None,
    ) -> None:
        """Initialize DecodeError exception.

        Args:
            message: Error message describing the failure
            entity: Entity being expanded (optional)
            field: Field path that failed to decode (optional)
            value: The value that could not be decoded (optional)
        """
        self.message = message
        self.entity = entity
        self.field = field
        self.value = value
        super().__init__(self._format())

    @property
    def location(self) -> str:
        """Dotted location of the fault, e.g. ``toleration[0].toleration_seconds``."""
        return ".".join(part for part in (self.entity, self.field) if part)

    def within(self, entity: str) -> "DecodeError":
        """Return a copy of this error nested under an enclosing entity.

        Used by expanders that delegate to nested expanders, so the final
        message names the full path from the outermost block.

        Args:
            entity: Name of the enclosing entity (e.g., "projected.sources[2]")

        Returns:
            New DecodeError whose entity is prefixed with ``entity``
        """
        inner = self.entity
        nested = f"{entity}.{inner}" if inner else entity
        return DecodeError(self.message, entity=nested, field=self.field, value=self.value)

    def _format(self) -> str:
        if self.location:
            return f"{self.location}: {self.message}"
        return self.message
