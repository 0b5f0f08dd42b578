"""
Parameter metadata and the parameter set registry.

Includes:
- placeholder: The tune() marker and is_placeholder()
- descriptor: Parameter kinds, domains, transforms and descriptors
- catalog: Default descriptors for well-known parameter names
- parameter_set: Ordered ParameterSet with update, merge and describe
"""

from .placeholder import Placeholder, tune, is_placeholder
from .descriptor import (
    IDENTITY,
    LOG2,
    LOG10,
    UNKNOWN,
    CategoricalDomain,
    NumericDomain,
    ParameterDescriptor,
    ParameterKind,
    ParameterTransform,
    categorical_parameter,
    is_unknown,
    numeric_parameter,
    unknown,
)
from .catalog import ParameterCatalog, DEFAULT_CATALOG, default_catalog
from .parameter_set import ParameterKey, ParameterSet, describe, update

__all__ = [
    'Placeholder',
    'tune',
    'is_placeholder',
    'IDENTITY',
    'LOG2',
    'LOG10',
    'UNKNOWN',
    'CategoricalDomain',
    'NumericDomain',
    'ParameterDescriptor',
    'ParameterKind',
    'ParameterTransform',
    'categorical_parameter',
    'is_unknown',
    'numeric_parameter',
    'unknown',
    'ParameterCatalog',
    'DEFAULT_CATALOG',
    'default_catalog',
    'ParameterKey',
    'ParameterSet',
    'describe',
    'update',
]
