"""
Parameter set construction and finalization.

Includes:
- builder: Scan pipeline stages for placeholders into a ParameterSet
- finalizer: Resolve data-dependent bounds against sample data
- binding: Put tuned values back into pipeline stages
- optuna_space: Optuna distributions and trial suggestions for a finalized set
"""

from .builder import ParameterSetBuilder, build_parameter_set, stage_ids
from .finalizer import Finalizer, RESOLUTION_RULES, finalize
from .binding import bind_parameters
from .optuna_space import (
    to_optuna_distributions,
    suggest_parameters,
    decode_parameters,
    decode_value,
)

__all__ = [
    'ParameterSetBuilder',
    'build_parameter_set',
    'stage_ids',
    'Finalizer',
    'RESOLUTION_RULES',
    'finalize',
    'bind_parameters',
    'to_optuna_distributions',
    'suggest_parameters',
    'decode_parameters',
    'decode_value',
]
