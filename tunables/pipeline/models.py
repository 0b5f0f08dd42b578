"""
Model specifications.

A model specification only declares its arguments; fitting is delegated to
an external engine. When executed against sample data a model stage passes
the predictors through, so the finalizer sees the shape the engine would
receive.
"""

from typing import Any, Dict, Optional, Tuple
import pandas as pd

from ..params.descriptor import ParameterDescriptor, numeric_parameter
from .base_stage import PipelineStage
from .registry import register_stage

MODES = ("regression", "classification")


class ModelSpec(PipelineStage):
    """
    Base class for model specifications.

    Subclasses list the engines they support; the engine may refine the
    descriptors of some arguments through ``tunable()``.
    """

    component = "model"
    engines: Tuple[str, ...] = ()

    def __init__(
        self,
        mode: str = "regression",
        engine: Optional[str] = None,
        id: Optional[str] = None,
        **arguments: Any
    ) -> None:
        """
        Initialize model specification.

        Args:
            mode: "regression" or "classification"
            engine: Fitting engine (defaults to the first supported engine)
            id: Stage id
            **arguments: Model arguments, concrete values, None or placeholders
        """
        if mode not in MODES:
            raise ValueError(f"mode must be one of {MODES}, got {mode!r}")
        engine = engine or (self.engines[0] if self.engines else None)
        if self.engines and engine not in self.engines:
            raise ValueError(f"Engine {engine!r} is not available for {self.component}. Available: {self.engines}")

        self.mode = mode
        self.engine = engine
        super().__init__(id=id, **arguments)

    def transform(self, data: pd.DataFrame) -> pd.DataFrame:
        return data

    def __repr__(self) -> str:
        return f"{super().__repr__()[:-1]}, engine={self.engine!r})"


@register_stage
class RandomForestSpec(ModelSpec):
    """Random forest: ``mtry`` predictors sampled per split, ``trees`` trees."""

    component = "rand_forest"
    engines = ("ranger", "randomForest")

    def __init__(
        self,
        mtry: Any = None,
        trees: Any = None,
        min_n: Any = None,
        mode: str = "regression",
        engine: Optional[str] = None,
        id: Optional[str] = None
    ) -> None:
        super().__init__(mode=mode, engine=engine, id=id, mtry=mtry, trees=trees, min_n=min_n)


@register_stage
class BoostTreeSpec(ModelSpec):
    """Gradient boosted trees."""

    component = "boost_tree"
    engines = ("xgboost", "lightgbm")

    def __init__(
        self,
        mtry: Any = None,
        trees: Any = None,
        min_n: Any = None,
        tree_depth: Any = None,
        learn_rate: Any = None,
        loss_reduction: Any = None,
        sample_size: Any = None,
        mode: str = "regression",
        engine: Optional[str] = None,
        id: Optional[str] = None
    ) -> None:
        super().__init__(
            mode=mode, engine=engine, id=id,
            mtry=mtry, trees=trees, min_n=min_n, tree_depth=tree_depth,
            learn_rate=learn_rate, loss_reduction=loss_reduction, sample_size=sample_size
        )

    def tunable(self) -> Dict[str, ParameterDescriptor]:
        # Both engines subsample rows by proportion rather than by count
        return {
            'sample_size': numeric_parameter(
                'sample_size', 0.1, 1.0,
                label='Proportion Observations Sampled',
                description=f'Row subsampling proportion used by {self.engine}',
            ),
        }


@register_stage
class NearestNeighborSpec(ModelSpec):
    """K-nearest neighbors."""

    component = "nearest_neighbor"
    engines = ("kknn",)

    def __init__(
        self,
        neighbors: Any = None,
        weight_func: Any = None,
        dist_power: Any = None,
        mode: str = "regression",
        engine: Optional[str] = None,
        id: Optional[str] = None
    ) -> None:
        super().__init__(
            mode=mode, engine=engine, id=id,
            neighbors=neighbors, weight_func=weight_func, dist_power=dist_power
        )


@register_stage
class LinearRegSpec(ModelSpec):
    """Penalized linear regression."""

    component = "linear_reg"
    engines = ("glmnet", "lm")

    def __init__(
        self,
        penalty: Any = None,
        mixture: Any = None,
        engine: Optional[str] = None,
        id: Optional[str] = None
    ) -> None:
        super().__init__(mode="regression", engine=engine, id=id, penalty=penalty, mixture=mixture)


@register_stage
class MLPSpec(ModelSpec):
    """Single hidden layer neural network."""

    component = "mlp"
    engines = ("keras", "nnet")

    def __init__(
        self,
        hidden_units: Any = None,
        penalty: Any = None,
        dropout: Any = None,
        epochs: Any = None,
        activation: Any = None,
        batch_size: Any = None,
        mode: str = "regression",
        engine: Optional[str] = None,
        id: Optional[str] = None
    ) -> None:
        super().__init__(
            mode=mode, engine=engine, id=id,
            hidden_units=hidden_units, penalty=penalty, dropout=dropout,
            epochs=epochs, activation=activation, batch_size=batch_size
        )
