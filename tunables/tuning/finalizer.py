"""
Finalizer: resolve data-dependent parameter bounds.

Some ranges can only be known once the data is seen, e.g. the number of
predictors sampled per split cannot exceed the number of columns reaching
the model. The finalizer runs the pipeline once against sample data and
fills unknown bounds using a small table of resolution rules.
"""

from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple
import pandas as pd

from ..errors import UnresolvableParameter
from ..params.descriptor import NumericDomain, ParameterDescriptor, ParameterKind, is_unknown
from ..params.parameter_set import ParameterKey, ParameterSet
from ..pipeline.base_stage import ResolvedShape
from ..utils.logging import LoggingMixin
from .builder import stage_ids

# Maps the shape of the data entering a stage to (lower, upper) in natural units
ResolutionRule = Callable[[ResolvedShape], Tuple[float, float]]


def predictor_count(shape: ResolvedShape) -> Tuple[int, int]:
    """Bounded by the number of columns reaching the stage."""
    return 1, shape.n_columns


def row_count(shape: ResolvedShape) -> Tuple[int, int]:
    """Bounded by the number of rows."""
    return 1, shape.n_rows


def row_fraction(shape: ResolvedShape) -> Tuple[int, int]:
    """Bounded by a third of the rows."""
    return 1, max(1, shape.n_rows // 3)


def batch_size(shape: ResolvedShape) -> Tuple[int, int]:
    """Between a tenth and a third of the rows."""
    return max(1, shape.n_rows // 10), max(1, shape.n_rows // 3)


RESOLUTION_RULES: Dict[str, ResolutionRule] = {
    'predictor_count': predictor_count,
    'row_count': row_count,
    'row_fraction': row_fraction,
    'batch_size': batch_size,
}


class Finalizer(LoggingMixin):
    """
    Resolves unknown bounds of a parameter set against sample data.

    Finalization is all or nothing: either every unresolved parameter gets
    concrete bounds or an UnresolvableParameter error is raised. The input
    set is never modified.
    """

    def __init__(self, rules: Optional[Mapping[str, ResolutionRule]] = None) -> None:
        """
        Initialize finalizer.

        Args:
            rules: Resolution rules by name (None for the built-in table)
        """
        self.rules: Dict[str, ResolutionRule] = dict(RESOLUTION_RULES if rules is None else rules)

    def finalize(
        self,
        parameter_set: ParameterSet,
        stages: Sequence[Any],
        sample_data: pd.DataFrame,
        outcomes: Sequence[str] = ()
    ) -> ParameterSet:
        """
        Resolve every unknown bound in a parameter set.

        Args:
            parameter_set: Set to finalize
            stages: Pipeline stages in execution order
            sample_data: Representative data to run the stages on
            outcomes: Outcome columns excluded from the predictors

        Returns:
            New, fully resolved ParameterSet

        Raises:
            UnresolvableParameter: If any unknown bound cannot be resolved
        """
        pending = parameter_set.unresolved()
        if not pending:
            self.log_info("All parameters already resolved; nothing to finalize")
            return parameter_set.copy()

        self._check_resolvable(parameter_set, pending, stages)

        input_shapes = self._execute(stages, sample_data, outcomes)

        resolved: Dict[ParameterKey, ParameterDescriptor] = {}
        for key in pending:
            resolved[key] = self._resolve(key, parameter_set[key], input_shapes[key.source])

        self.log_info(f"Finalized {len(resolved)} parameter(s): {[key.id for key in resolved]}")
        return parameter_set.replace_descriptors(resolved)

    def _check_resolvable(
        self,
        parameter_set: ParameterSet,
        pending: List[ParameterKey],
        stages: Sequence[Any]
    ) -> None:
        """Fail before running anything if some unknown bound has no way to resolve."""
        known_stages = set(stage_ids(stages))
        problems = []

        for key in pending:
            descriptor = parameter_set[key]
            if descriptor.resolver is None:
                problems.append(f"'{key.id}' has no resolution rule")
            elif descriptor.resolver not in self.rules:
                problems.append(f"'{key.id}' uses unknown resolution rule '{descriptor.resolver}'")
            elif key.source not in known_stages:
                problems.append(f"'{key.id}' comes from stage '{key.source}', which is not in the pipeline")

        if problems:
            message = "Cannot finalize parameter set: " + "; ".join(problems)
            self.log_error(message)
            raise UnresolvableParameter(message, [key.id for key in pending])

    def _execute(
        self,
        stages: Sequence[Any],
        sample_data: pd.DataFrame,
        outcomes: Sequence[str]
    ) -> Dict[str, ResolvedShape]:
        """
        Run every stage once, recording the shape entering each stage.

        Returns:
            Mapping of stage id to the shape of that stage's input
        """
        if not isinstance(sample_data, pd.DataFrame):
            raise ValueError("Sample data must be a pandas DataFrame")

        missing = [column for column in outcomes if column not in sample_data.columns]
        if missing:
            raise ValueError(f"Missing outcome columns: {missing}")

        data = sample_data.drop(columns=list(outcomes))
        shape = ResolvedShape.from_frame(data)
        self.log_info(f"Executing {len(stages)} stage(s) on sample data with shape ({shape.n_rows}, {shape.n_columns})")

        input_shapes: Dict[str, ResolvedShape] = {}
        for stage, source in zip(stages, stage_ids(stages)):
            input_shapes[source] = shape
            try:
                shape = stage.execute(data)
            except Exception as e:
                self.log_error(f"Stage '{source}' failed during finalization: {e}")
                raise
            if shape.data is not None:
                data = shape.data
            self.log_debug(f"Stage '{source}' produced shape ({shape.n_rows}, {shape.n_columns})")

        return input_shapes

    def _resolve(
        self,
        key: ParameterKey,
        descriptor: ParameterDescriptor,
        shape: ResolvedShape
    ) -> ParameterDescriptor:
        """Fill the unknown endpoints of one descriptor."""
        rule = self.rules[descriptor.resolver]
        natural_lower, natural_upper = rule(shape)

        domain = descriptor.domain
        lower = self._encode(descriptor, natural_lower) if is_unknown(domain.lower) else domain.lower
        upper = self._encode(descriptor, natural_upper) if is_unknown(domain.upper) else domain.upper

        if lower > upper:
            message = (
                f"Resolved range for '{key.id}' is empty: lower {lower!r} > upper {upper!r} "
                f"(stage '{key.source}' receives {shape.n_rows} rows, {shape.n_columns} columns)"
            )
            self.log_error(message)
            raise UnresolvableParameter(message, [key.id])

        self.log_debug(f"Resolved '{key.id}' via {descriptor.resolver}: [{lower}, {upper}]")
        return descriptor.with_domain(NumericDomain(lower, upper))

    @staticmethod
    def _encode(descriptor: ParameterDescriptor, value: float) -> float:
        if descriptor.transform.is_identity:
            return int(value) if descriptor.kind is ParameterKind.INTEGER else float(value)
        return descriptor.transform.forward(value)


def finalize(
    parameter_set: ParameterSet,
    stages: Sequence[Any],
    sample_data: pd.DataFrame,
    outcomes: Sequence[str] = (),
    rules: Optional[Mapping[str, ResolutionRule]] = None
) -> ParameterSet:
    """
    Convenience function for finalizing a parameter set.

    Args:
        parameter_set: Set to finalize
        stages: Pipeline stages in execution order
        sample_data: Representative data to run the stages on
        outcomes: Outcome columns excluded from the predictors
        rules: Resolution rules by name (None for the built-in table)

    Returns:
        New, fully resolved ParameterSet
    """
    return Finalizer(rules=rules).finalize(parameter_set, stages, sample_data, outcomes=outcomes)
