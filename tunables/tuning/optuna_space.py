"""
Optuna bridge for finalized parameter sets.

Translates descriptors into Optuna distributions and draws trial values,
inverting parameter transforms so callers receive natural units. Running
a study is left to the caller.
"""

from typing import Any, Dict, Mapping

import optuna
from optuna.distributions import (
    BaseDistribution,
    CategoricalDistribution,
    FloatDistribution,
    IntDistribution,
)

from ..errors import ParameterSetNotFinalized
from ..params.descriptor import CategoricalDomain, ParameterDescriptor, ParameterKind
from ..params.parameter_set import ParameterSet


def _require_finalized(parameter_set: ParameterSet) -> None:
    pending = parameter_set.unresolved()
    if pending:
        raise ParameterSetNotFinalized([key.id for key in pending])


def _distribution(descriptor: ParameterDescriptor) -> BaseDistribution:
    if isinstance(descriptor.domain, CategoricalDomain):
        return CategoricalDistribution(choices=descriptor.domain.values)

    lower, upper = descriptor.domain.as_tuple()
    if descriptor.kind is ParameterKind.INTEGER and descriptor.transform.is_identity:
        return IntDistribution(low=int(lower), high=int(upper))
    # Transformed parameters are sampled in transformed units
    return FloatDistribution(low=float(lower), high=float(upper))


def to_optuna_distributions(parameter_set: ParameterSet) -> Dict[str, BaseDistribution]:
    """
    Map each parameter id to an Optuna distribution.

    Args:
        parameter_set: Finalized parameter set

    Returns:
        Dictionary of id -> distribution, in set order

    Raises:
        ParameterSetNotFinalized: If any bound is still unknown
    """
    _require_finalized(parameter_set)
    return {key.id: _distribution(descriptor) for key, descriptor in parameter_set.items()}


def decode_value(descriptor: ParameterDescriptor, raw: Any) -> Any:
    """Convert a value sampled in transformed units back to natural units."""
    if descriptor.kind is ParameterKind.CATEGORICAL or descriptor.transform.is_identity:
        return raw
    value = descriptor.transform.inverse(raw)
    if descriptor.kind is ParameterKind.INTEGER:
        return int(round(value))
    return value


def decode_parameters(parameter_set: ParameterSet, raw_values: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Decode a mapping of id -> sampled value, e.g. ``study.best_params``.

    Args:
        parameter_set: Set the values were sampled from
        raw_values: Values in transformed units keyed by parameter id

    Returns:
        Values in natural units keyed by parameter id
    """
    return {
        parameter_id: decode_value(parameter_set[parameter_id], raw)
        for parameter_id, raw in raw_values.items()
    }


def suggest_parameters(trial: optuna.Trial, parameter_set: ParameterSet) -> Dict[str, Any]:
    """
    Sample one value per parameter for an Optuna trial.

    Args:
        trial: Optuna trial object
        parameter_set: Finalized parameter set

    Returns:
        Dictionary of id -> value in natural units

    Raises:
        ParameterSetNotFinalized: If any bound is still unknown
    """
    _require_finalized(parameter_set)

    params = {}
    for key, descriptor in parameter_set.items():
        domain = descriptor.domain

        if isinstance(domain, CategoricalDomain):
            raw = trial.suggest_categorical(key.id, list(domain.values))
        elif descriptor.kind is ParameterKind.INTEGER and descriptor.transform.is_identity:
            raw = trial.suggest_int(key.id, int(domain.lower), int(domain.upper))
        else:
            raw = trial.suggest_float(key.id, float(domain.lower), float(domain.upper))

        params[key.id] = decode_value(descriptor, raw)

    return params
