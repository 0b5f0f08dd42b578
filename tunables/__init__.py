"""
Tunable Parameter Registry

Marks pipeline arguments for optimization, collects them into a parameter
set with domain metadata, and resolves data-dependent bounds by running the
pipeline once against sample data.
"""

__version__ = "0.1.0"
__author__ = "Tunables Developers"

from .errors import (
    TunablesError,
    UnknownParameterKind,
    ParameterConflict,
    UnknownParameterKey,
    KindMismatch,
    UnresolvableParameter,
    ParameterSetNotFinalized,
    UnknownStageComponent,
)
from .params import (
    Placeholder,
    tune,
    is_placeholder,
    ParameterDescriptor,
    ParameterKind,
    NumericDomain,
    CategoricalDomain,
    UNKNOWN,
    unknown,
    ParameterKey,
    ParameterSet,
    describe,
    update,
)
from .tuning import build_parameter_set, finalize, bind_parameters

__all__ = [
    'TunablesError',
    'UnknownParameterKind',
    'ParameterConflict',
    'UnknownParameterKey',
    'KindMismatch',
    'UnresolvableParameter',
    'ParameterSetNotFinalized',
    'UnknownStageComponent',
    'Placeholder',
    'tune',
    'is_placeholder',
    'ParameterDescriptor',
    'ParameterKind',
    'NumericDomain',
    'CategoricalDomain',
    'UNKNOWN',
    'unknown',
    'ParameterKey',
    'ParameterSet',
    'describe',
    'update',
    'build_parameter_set',
    'finalize',
    'bind_parameters',
]
