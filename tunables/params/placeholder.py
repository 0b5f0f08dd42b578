"""
Placeholder marker for arguments that should be optimized.

Assign ``tune()`` to any stage argument instead of a concrete value to
flag it for tuning. ``tune("longitude df")`` attaches an identifier that
keeps two occurrences of the same parameter apart inside one pipeline.
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Placeholder:
    """Marker value with an optional disambiguating identifier."""

    identifier: Optional[str] = None

    def __post_init__(self) -> None:
        if self.identifier is not None:
            if not isinstance(self.identifier, str):
                raise TypeError(
                    f"Placeholder identifier must be a string, got {type(self.identifier).__name__}"
                )
            if not self.identifier.strip():
                raise ValueError("Placeholder identifier cannot be blank")

    @property
    def is_anonymous(self) -> bool:
        return self.identifier is None

    def __repr__(self) -> str:
        if self.identifier is None:
            return "tune()"
        return f"tune({self.identifier!r})"


def tune(identifier: Optional[str] = None) -> Placeholder:
    """
    Mark an argument for optimization.

    Args:
        identifier: Optional label distinguishing this occurrence from other
            placeholders on an argument with the same name

    Returns:
        Placeholder marker

    Example:
        >>> RandomForestSpec(mtry=tune(), trees=500)
        >>> SplineStep("longitude", deg_free=tune("longitude df"))
    """
    return Placeholder(identifier)


def is_placeholder(value: Any) -> bool:
    """Return True exactly when ``value`` is a placeholder marker."""
    return isinstance(value, Placeholder)
