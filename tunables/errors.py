"""
Exception hierarchy for the tunables package.

Every error is raised synchronously to the caller; nothing in the package
retries or swallows them.
"""

from typing import Iterable, Optional


class TunablesError(ValueError):
    """Base class for all tunable-parameter registry errors."""


class UnknownParameterKind(TunablesError):
    """A placeholder sits on an argument with no canonical descriptor."""

    def __init__(self, name: str, source: Optional[str] = None) -> None:
        self.name = name
        self.source = source
        where = f" in stage '{source}'" if source else ""
        super().__init__(
            f"Argument '{name}'{where} is marked for tuning but has no known "
            f"parameter descriptor. Register one in the catalog or give the "
            f"stage a tunable() override."
        )


class ParameterConflict(TunablesError):
    """Two declarations from different stages share one parameter id."""

    def __init__(
        self,
        parameter_id: str,
        sources: Iterable[str],
        kinds: Iterable[str] = ()
    ) -> None:
        self.parameter_id = parameter_id
        self.sources = tuple(sources)
        self.kinds = tuple(kinds)
        where = " and ".join(f"'{source}'" for source in self.sources)
        as_kinds = f" as {' and '.join(self.kinds)}" if len(set(self.kinds)) > 1 else ""
        super().__init__(
            f"Parameter '{parameter_id}' is declared by stages {where}{as_kinds}. "
            f"Give the placeholders explicit identifiers, e.g. tune('{parameter_id} 2')."
        )


class UnknownParameterKey(TunablesError, KeyError):
    """Lookup of a key that is not part of the parameter set."""

    def __init__(self, key: object, available: Iterable[str] = ()) -> None:
        self.key = key
        known = ", ".join(available) or "none"
        message = f"Parameter {key!r} is not in the set. Available ids: {known}"
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError would otherwise wrap the message in quotes
        return self.message


class KindMismatch(TunablesError):
    """A replacement domain or descriptor has a different parameter kind."""

    def __init__(self, parameter_id: str, expected: str, got: str) -> None:
        self.parameter_id = parameter_id
        super().__init__(
            f"Cannot update parameter '{parameter_id}': expected a {expected} "
            f"replacement, got {got}"
        )


class UnresolvableParameter(TunablesError):
    """Unknown bounds that the finalizer cannot resolve."""

    def __init__(self, message: str, parameter_ids: Iterable[str] = ()) -> None:
        self.parameter_ids = tuple(parameter_ids)
        super().__init__(message)


class ParameterSetNotFinalized(TunablesError):
    """An operation needs concrete bounds but the set still has unknowns."""

    def __init__(self, parameter_ids: Iterable[str]) -> None:
        self.parameter_ids = tuple(parameter_ids)
        super().__init__(
            f"Parameter set has unresolved bounds for: {', '.join(self.parameter_ids)}. "
            f"Call finalize() or update() the ranges first."
        )


class UnknownStageComponent(TunablesError):
    """A pipeline configuration names a stage component that is not registered."""

    def __init__(self, component: str, available: Iterable[str] = ()) -> None:
        self.component = component
        known = ", ".join(available) or "none"
        super().__init__(f"Unknown stage component '{component}'. Available components: {known}")
