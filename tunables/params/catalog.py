"""
Canonical default descriptors for well-known tuning parameters.

The registry builder looks parameters up here by argument name when a stage
does not supply its own descriptor. Data-dependent bounds are left unknown
and carry the name of the finalization rule that resolves them.
"""

from typing import Dict, Iterable, Iterator, List, Optional

import pandas as pd

from ..errors import UnknownParameterKind
from .descriptor import (
    LOG2,
    LOG10,
    UNKNOWN,
    ParameterDescriptor,
    categorical_parameter,
    numeric_parameter,
)


class ParameterCatalog:
    """Registry mapping argument names to default parameter descriptors."""

    def __init__(self, descriptors: Optional[Iterable[ParameterDescriptor]] = None) -> None:
        self._descriptors: Dict[str, ParameterDescriptor] = {}
        for descriptor in descriptors or ():
            self.register(descriptor)

    def register(self, descriptor: ParameterDescriptor, overwrite: bool = False) -> ParameterDescriptor:
        """
        Add a descriptor to the catalog.

        Args:
            descriptor: Default descriptor, keyed by its name
            overwrite: Replace an existing entry with the same name

        Returns:
            The registered descriptor

        Raises:
            ValueError: If the name is already registered and overwrite is False
        """
        if descriptor.name in self._descriptors and not overwrite:
            raise ValueError(f"Parameter '{descriptor.name}' is already registered")
        self._descriptors[descriptor.name] = descriptor
        return descriptor

    def get(self, name: str, source: Optional[str] = None) -> ParameterDescriptor:
        """
        Look up the default descriptor for an argument name.

        Raises:
            UnknownParameterKind: If the name is not registered
        """
        try:
            return self._descriptors[name]
        except KeyError:
            raise UnknownParameterKind(name, source) from None

    def names(self) -> List[str]:
        return list(self._descriptors)

    def copy(self) -> "ParameterCatalog":
        return ParameterCatalog(self._descriptors.values())

    def to_frame(self) -> pd.DataFrame:
        """Catalog contents as a DataFrame, one row per parameter."""
        rows = []
        for descriptor in self._descriptors.values():
            rows.append({
                'name': descriptor.name,
                'label': descriptor.label,
                'kind': descriptor.kind.value,
                'domain': str(descriptor.domain),
                'transform': descriptor.transform.name,
                'resolver': descriptor.resolver or '',
            })
        return pd.DataFrame(rows, columns=['name', 'label', 'kind', 'domain', 'transform', 'resolver'])

    def __contains__(self, name: object) -> bool:
        return name in self._descriptors

    def __iter__(self) -> Iterator[str]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)


KNN_WEIGHT_FUNCTIONS = (
    "rectangular", "triangular", "epanechnikov", "biweight", "triweight",
    "cos", "inv", "gaussian", "rank", "optimal",
)

ACTIVATIONS = ("linear", "softmax", "relu", "elu", "tanh")


def _builtin_descriptors() -> List[ParameterDescriptor]:
    return [
        # Tree ensembles
        numeric_parameter(
            'mtry', 1, UNKNOWN, integer=True,
            label='# Randomly Selected Predictors', resolver='predictor_count',
            description='Number of predictors sampled at each split',
        ),
        numeric_parameter('trees', 1, 2000, integer=True, label='# Trees'),
        numeric_parameter('min_n', 2, 40, integer=True, label='Minimal Node Size'),
        numeric_parameter('tree_depth', 1, 15, integer=True, label='Tree Depth'),
        numeric_parameter('learn_rate', -10, -1, transform=LOG10, label='Learning Rate'),
        numeric_parameter('loss_reduction', -10, 1.5, transform=LOG10, label='Minimum Loss Reduction'),
        numeric_parameter(
            'sample_size', 1, UNKNOWN, integer=True,
            label='# Observations Sampled', resolver='row_fraction',
        ),
        # Regularized regression
        numeric_parameter('penalty', -10, 0, transform=LOG10, label='Amount of Regularization'),
        numeric_parameter('mixture', 0.0, 1.0, label='Proportion of Lasso Penalty'),
        # Nearest neighbors
        numeric_parameter(
            'neighbors', 1, UNKNOWN, integer=True,
            label='# Nearest Neighbors', resolver='row_count',
        ),
        categorical_parameter('weight_func', KNN_WEIGHT_FUNCTIONS, label='Distance Weighting Function'),
        numeric_parameter('dist_power', 1.0, 2.0, label='Minkowski Distance Order'),
        # Neural networks
        numeric_parameter('hidden_units', 1, 10, integer=True, label='# Hidden Units'),
        numeric_parameter('epochs', 10, 1000, integer=True, label='# Epochs'),
        numeric_parameter('dropout', 0.0, 1.0, label='Dropout Rate'),
        categorical_parameter('activation', ACTIVATIONS, label='Activation Function'),
        numeric_parameter(
            'batch_size', UNKNOWN, UNKNOWN, integer=True, transform=LOG2,
            label='Batch Size', resolver='batch_size',
        ),
        # Preprocessing
        numeric_parameter('deg_free', 1, 5, integer=True, label='Spline Degrees of Freedom'),
        numeric_parameter('num_comp', 1, 4, integer=True, label='# Components'),
        numeric_parameter(
            'num_terms', 1, UNKNOWN, integer=True,
            label='# Model Terms', resolver='predictor_count',
        ),
        numeric_parameter('threshold', 0.0, 1.0, label='Threshold'),
        categorical_parameter('one_hot', (True, False), label='One-Hot Encoding'),
    ]


DEFAULT_CATALOG = ParameterCatalog(_builtin_descriptors())


def default_catalog() -> ParameterCatalog:
    """Return the shared catalog of well-known parameters."""
    return DEFAULT_CATALOG
