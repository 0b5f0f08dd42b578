"""
Parameter descriptors: metadata for one tunable quantity.

A descriptor records what kind of value a parameter takes, its domain
(numeric bounds or categorical levels) and the transformation used when
values are sampled or encoded. Numeric bounds may be ``UNKNOWN`` until the
pipeline is finalized against data.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Optional, Sequence, Tuple, Union
import math

import numpy as np


class ParameterKind(str, Enum):
    """Kinds of tunable values."""

    CONTINUOUS = "numeric-continuous"
    INTEGER = "numeric-integer"
    CATEGORICAL = "categorical"

    @property
    def is_numeric(self) -> bool:
        return self is not ParameterKind.CATEGORICAL


class _Unknown:
    """Sentinel for a numeric bound that cannot be determined yet."""

    _instance: Optional["_Unknown"] = None

    def __new__(cls) -> "_Unknown":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "unknown()"

    def __reduce__(self):
        return (_Unknown, ())


UNKNOWN = _Unknown()

Bound = Union[float, int, _Unknown]


def unknown() -> _Unknown:
    """Return the unknown-bound sentinel."""
    return UNKNOWN


def is_unknown(value: Any) -> bool:
    return value is UNKNOWN


@dataclass(frozen=True)
class ParameterTransform:
    """
    Monotonic invertible transformation applied to a numeric parameter.

    Domains of transformed parameters are expressed in transformed units,
    e.g. a ``log10`` penalty with bounds ``[-10, 0]`` spans ``1e-10`` to ``1``.
    Transforms compare by name only.
    """

    name: str
    forward: Callable[[float], float] = field(compare=False, repr=False)
    inverse: Callable[[float], float] = field(compare=False, repr=False)

    @property
    def is_identity(self) -> bool:
        return self.name == "identity"


IDENTITY = ParameterTransform("identity", lambda x: x, lambda x: x)
LOG10 = ParameterTransform("log10", lambda x: float(np.log10(x)), lambda x: float(10.0 ** x))
LOG2 = ParameterTransform("log2", lambda x: float(np.log2(x)), lambda x: float(2.0 ** x))


@dataclass(frozen=True)
class NumericDomain:
    """Inclusive ``[lower, upper]`` range; either endpoint may be ``UNKNOWN``."""

    lower: Bound = UNKNOWN
    upper: Bound = UNKNOWN

    def __post_init__(self) -> None:
        for bound_name in ("lower", "upper"):
            value = getattr(self, bound_name)
            if is_unknown(value):
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float, np.number)):
                raise TypeError(f"Numeric {bound_name} bound must be a number or unknown(), got {value!r}")
            if math.isnan(float(value)):
                raise ValueError(f"Numeric {bound_name} bound cannot be NaN")
        if not self.has_unknowns() and self.lower > self.upper:
            raise ValueError(f"Lower bound {self.lower!r} exceeds upper bound {self.upper!r}")

    def has_unknowns(self) -> bool:
        return is_unknown(self.lower) or is_unknown(self.upper)

    def as_tuple(self) -> Tuple[Bound, Bound]:
        return (self.lower, self.upper)

    def __str__(self) -> str:
        return f"[{_format_bound(self.lower)}, {_format_bound(self.upper)}]"


@dataclass(frozen=True)
class CategoricalDomain:
    """Finite ordered set of allowed levels."""

    values: Tuple[Any, ...]

    def __post_init__(self) -> None:
        values = tuple(self.values)
        if not values:
            raise ValueError("Categorical domain must define at least one value")
        if len(set(map(repr, values))) != len(values):
            raise ValueError(f"Categorical domain has duplicate values: {values!r}")
        object.__setattr__(self, "values", values)

    def has_unknowns(self) -> bool:
        return False

    def __str__(self) -> str:
        return "{" + ", ".join(map(str, self.values)) + "}"


Domain = Union[NumericDomain, CategoricalDomain]


@dataclass(frozen=True)
class ParameterDescriptor:
    """
    Immutable description of a single tunable parameter.

    Attributes:
        name: Argument name the parameter binds to
        label: Human readable label
        kind: Value kind (continuous, integer or categorical)
        domain: NumericDomain for numeric kinds, CategoricalDomain otherwise
        transform: Transformation for numeric kinds (bounds are in transformed units)
        resolver: Name of the finalization rule for unknown bounds, if any
        description: Free text description
    """

    name: str
    label: str
    kind: ParameterKind
    domain: Domain
    transform: ParameterTransform = IDENTITY
    resolver: Optional[str] = None
    description: str = ""

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Parameter name cannot be empty")
        kind = ParameterKind(self.kind)
        object.__setattr__(self, "kind", kind)
        if kind.is_numeric and not isinstance(self.domain, NumericDomain):
            raise TypeError(f"Parameter {self.name} is {kind.value} and needs a NumericDomain")
        if not kind.is_numeric:
            if not isinstance(self.domain, CategoricalDomain):
                raise TypeError(f"Parameter {self.name} is categorical and needs a CategoricalDomain")
            if not self.transform.is_identity:
                raise ValueError(f"Categorical parameter {self.name} cannot carry a transform")

    def is_resolved(self) -> bool:
        """Return True when no domain bound is unknown."""
        return not self.domain.has_unknowns()

    @property
    def status(self) -> str:
        return "resolved" if self.is_resolved() else "unresolved"

    def natural_range(self) -> Tuple[Bound, Bound]:
        """
        Bounds in natural (untransformed) units.

        Unknown endpoints stay unknown.

        Raises:
            TypeError: For categorical parameters
        """
        if not isinstance(self.domain, NumericDomain):
            raise TypeError(f"Parameter {self.name} is categorical and has no numeric range")
        lower, upper = self.domain.as_tuple()
        if not is_unknown(lower):
            lower = self.transform.inverse(lower)
        if not is_unknown(upper):
            upper = self.transform.inverse(upper)
        return lower, upper

    def with_domain(self, domain: Domain) -> "ParameterDescriptor":
        return replace(self, domain=domain)

    def with_label(self, label: str) -> "ParameterDescriptor":
        return replace(self, label=label)


def numeric_parameter(
    name: str,
    lower: Bound = UNKNOWN,
    upper: Bound = UNKNOWN,
    *,
    integer: bool = False,
    label: Optional[str] = None,
    transform: ParameterTransform = IDENTITY,
    resolver: Optional[str] = None,
    description: str = "",
) -> ParameterDescriptor:
    """
    Create a numeric parameter descriptor.

    Args:
        name: Argument name
        lower: Lower bound in transformed units (or UNKNOWN)
        upper: Upper bound in transformed units (or UNKNOWN)
        integer: Whether the parameter takes whole numbers
        label: Human readable label (defaults to name)
        transform: Transformation applied to the bounds
        resolver: Finalization rule used for unknown bounds
        description: Free text description

    Returns:
        ParameterDescriptor
    """
    return ParameterDescriptor(
        name=name,
        label=label or name,
        kind=ParameterKind.INTEGER if integer else ParameterKind.CONTINUOUS,
        domain=NumericDomain(lower, upper),
        transform=transform,
        resolver=resolver,
        description=description,
    )


def categorical_parameter(
    name: str,
    values: Sequence[Any],
    *,
    label: Optional[str] = None,
    description: str = "",
) -> ParameterDescriptor:
    """Create a categorical parameter descriptor with the given levels."""
    return ParameterDescriptor(
        name=name,
        label=label or name,
        kind=ParameterKind.CATEGORICAL,
        domain=CategoricalDomain(tuple(values)),
        description=description,
    )


def _format_bound(value: Bound) -> str:
    if is_unknown(value):
        return "?"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
