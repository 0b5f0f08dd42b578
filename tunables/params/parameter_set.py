"""
Ordered registry of tunable parameters for one pipeline.

A ParameterSet maps composite keys ``(source, name, identifier)`` to
descriptors. Sets behave as values: ``update`` and ``merge`` return new
sets and never modify the receiver, so a set can be shared freely.
"""

from collections.abc import Mapping
from typing import Any, Dict, Iterable, Iterator, List, NamedTuple, Optional, Tuple, Union

import pandas as pd

from ..errors import KindMismatch, ParameterConflict, UnknownParameterKey
from ..utils.logging import get_logger
from .descriptor import (
    CategoricalDomain,
    Domain,
    NumericDomain,
    ParameterDescriptor,
    ParameterKind,
    is_unknown,
)

logger = get_logger("parameter_set")


class ParameterKey(NamedTuple):
    """Composite key of a parameter: declaring stage, argument name, identifier."""

    source: str
    name: str
    identifier: Optional[str] = None

    @property
    def id(self) -> str:
        """Effective id: the identifier when present, else the argument name."""
        return self.identifier or self.name


KeyLike = Union[ParameterKey, str]
Replacement = Union[ParameterDescriptor, NumericDomain, CategoricalDomain, Tuple[Any, Any], List[Any]]


class ParameterSet(Mapping):
    """
    Ordered mapping of ParameterKey -> ParameterDescriptor.

    Effective ids (identifier or name) are unique, so every id names the
    argument of exactly one stage. A second entry with an existing id raises
    ParameterConflict. Entries are kept in insertion order.
    """

    def __init__(self, entries: Iterable[Tuple[ParameterKey, ParameterDescriptor]] = ()) -> None:
        self._entries: Dict[str, Tuple[ParameterKey, ParameterDescriptor]] = {}
        for key, descriptor in entries:
            self._add(key, descriptor)

    def _add(self, key: ParameterKey, descriptor: ParameterDescriptor) -> None:
        existing = self._entries.get(key.id)
        if existing is not None:
            existing_key, existing_descriptor = existing
            logger.error(
                "Parameter '%s' declared by stage '%s' collides with stage '%s'",
                key.id, key.source, existing_key.source
            )
            raise ParameterConflict(
                key.id,
                (existing_key.source, key.source),
                (existing_descriptor.kind.value, descriptor.kind.value),
            )
        self._entries[key.id] = (key, descriptor)

    # Mapping protocol

    def __getitem__(self, key: KeyLike) -> ParameterDescriptor:
        return self._entry(key)[1]

    def __iter__(self) -> Iterator[ParameterKey]:
        return (key for key, _ in self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        if isinstance(key, ParameterKey):
            entry = self._entries.get(key.id)
            return entry is not None and entry[0] == key
        if isinstance(key, str):
            return key in self._entries
        return False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParameterSet):
            return NotImplemented
        return list(self.items()) == list(other.items())

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        inner = ", ".join(f"{key.id}: {descriptor.domain}" for key, descriptor in self.items())
        return f"ParameterSet({inner})"

    # Lookup helpers

    def _entry(self, key: KeyLike) -> Tuple[ParameterKey, ParameterDescriptor]:
        lookup = key.id if isinstance(key, ParameterKey) else key
        entry = self._entries.get(lookup) if isinstance(lookup, str) else None
        if entry is None or (isinstance(key, ParameterKey) and entry[0] != key):
            raise UnknownParameterKey(key, self.ids)
        return entry

    def key_for(self, key: KeyLike) -> ParameterKey:
        """Return the full composite key for an id or key."""
        return self._entry(key)[0]

    @property
    def ids(self) -> List[str]:
        return list(self._entries)

    def unresolved(self) -> List[ParameterKey]:
        """Keys whose domains still have unknown bounds."""
        return [key for key, descriptor in self.items() if not descriptor.is_resolved()]

    def is_finalized(self) -> bool:
        return not self.unresolved()

    # Derived sets

    def copy(self) -> "ParameterSet":
        return ParameterSet(self.items())

    def update(self, key: KeyLike, replacement: Replacement) -> "ParameterSet":
        """
        Return a copy with one parameter's domain or descriptor replaced.

        Args:
            key: ParameterKey or effective id
            replacement: A ParameterDescriptor, a NumericDomain or CategoricalDomain,
                a ``(lower, upper)`` tuple for numeric parameters, or a list of
                levels for categorical parameters

        Returns:
            New ParameterSet; the receiver is unchanged

        Raises:
            UnknownParameterKey: If the key is not in the set
            KindMismatch: If the replacement has a different parameter kind
            ValueError: If the replacement would make a resolved parameter unresolved
        """
        full_key, current = self._entry(key)
        updated = _apply_replacement(full_key.id, current, replacement)

        entries = [
            (entry_key, updated if entry_key == full_key else descriptor)
            for entry_key, descriptor in self.items()
        ]
        logger.debug("Updated parameter '%s': %s -> %s", full_key.id, current.domain, updated.domain)
        return ParameterSet(entries)

    def merge(self, other: "ParameterSet") -> "ParameterSet":
        """
        Union of two sets, receiver entries first.

        Raises:
            ParameterConflict: If an id appears in both sets
        """
        return ParameterSet(list(self.items()) + list(other.items()))

    def replace_descriptors(self, replacements: Mapping) -> "ParameterSet":
        """Return a copy with descriptors swapped for the given keys, order preserved."""
        return ParameterSet(
            (key, replacements.get(key, descriptor)) for key, descriptor in self.items()
        )

    # Presentation

    def to_frame(self) -> pd.DataFrame:
        """
        Tabular view of the set.

        Returns:
            DataFrame with one row per parameter and columns id, source, name,
            identifier, kind, lower, upper, values, transform, label, status.
            Unknown bounds are reported as None.
        """
        columns = [
            'id', 'source', 'name', 'identifier', 'kind', 'lower', 'upper',
            'values', 'transform', 'label', 'status'
        ]
        rows = []
        for key, descriptor in self.items():
            domain = descriptor.domain
            lower = upper = values = None
            if isinstance(domain, NumericDomain):
                lower = None if is_unknown(domain.lower) else domain.lower
                upper = None if is_unknown(domain.upper) else domain.upper
            else:
                values = list(domain.values)
            rows.append({
                'id': key.id,
                'source': key.source,
                'name': key.name,
                'identifier': key.identifier,
                'kind': descriptor.kind.value,
                'lower': lower,
                'upper': upper,
                'values': values,
                'transform': descriptor.transform.name,
                'label': descriptor.label,
                'status': descriptor.status,
            })
        return pd.DataFrame(rows, columns=columns)

    def describe(self) -> str:
        return describe(self)


def update(parameter_set: ParameterSet, key: KeyLike, replacement: Replacement) -> ParameterSet:
    """Functional form of ParameterSet.update."""
    return parameter_set.update(key, replacement)


def describe(parameter_set: ParameterSet) -> str:
    """
    Human readable table of a parameter set.

    Lists id, declaring stage, kind, domain, transform and whether the
    domain is resolved.
    """
    if not len(parameter_set):
        return "Parameter set is empty"

    rows = []
    for key, descriptor in parameter_set.items():
        rows.append({
            'id': key.id,
            'source': key.source,
            'kind': descriptor.kind.value,
            'domain': str(descriptor.domain),
            'transform': descriptor.transform.name,
            'status': descriptor.status,
        })
    table = pd.DataFrame(rows).to_string(index=False)

    n_unresolved = len(parameter_set.unresolved())
    footer = f"{len(parameter_set)} parameter(s), {n_unresolved} unresolved"
    return f"{table}\n{footer}"


def _apply_replacement(
    parameter_id: str,
    current: ParameterDescriptor,
    replacement: Replacement
) -> ParameterDescriptor:
    """Validate a replacement against the current descriptor and build the new one."""
    updated = _replace_descriptor(parameter_id, current, replacement)
    # Resolution is one way: known bounds never turn back into unknown()
    if current.is_resolved() and not updated.is_resolved():
        raise ValueError(
            f"Cannot update parameter '{parameter_id}': it is resolved and the "
            f"replacement {updated.domain} has unknown bounds"
        )
    return updated


def _replace_descriptor(
    parameter_id: str,
    current: ParameterDescriptor,
    replacement: Replacement
) -> ParameterDescriptor:
    if isinstance(replacement, ParameterDescriptor):
        if replacement.kind is not current.kind:
            raise KindMismatch(parameter_id, current.kind.value, replacement.kind.value)
        # The key's argument name and label stay attached to the entry
        return ParameterDescriptor(
            name=current.name,
            label=current.label,
            kind=replacement.kind,
            domain=replacement.domain,
            transform=replacement.transform,
            resolver=replacement.resolver,
            description=replacement.description or current.description,
        )

    domain = _coerce_domain(replacement)
    if isinstance(domain, NumericDomain) and current.kind is ParameterKind.CATEGORICAL:
        raise KindMismatch(parameter_id, "categorical", "numeric domain")
    if isinstance(domain, CategoricalDomain) and current.kind.is_numeric:
        raise KindMismatch(parameter_id, current.kind.value, "categorical domain")
    return current.with_domain(domain)


def _coerce_domain(replacement: Any) -> Domain:
    if isinstance(replacement, (NumericDomain, CategoricalDomain)):
        return replacement
    if isinstance(replacement, tuple):
        if len(replacement) != 2:
            raise ValueError(f"Numeric range must be a (lower, upper) pair, got {replacement!r}")
        return NumericDomain(*replacement)
    if isinstance(replacement, list):
        return CategoricalDomain(tuple(replacement))
    raise TypeError(
        "Replacement must be a ParameterDescriptor, NumericDomain, CategoricalDomain, "
        f"(lower, upper) tuple or list of levels, got {type(replacement).__name__}"
    )
