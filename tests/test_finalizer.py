"""
Tests for resolving data-dependent bounds against sample data.
"""

import logging

import pytest
import pandas as pd
import numpy as np

from tunables.errors import UnresolvableParameter
from tunables.params import (
    LOG2,
    UNKNOWN,
    NumericDomain,
    ParameterKey,
    ParameterSet,
    numeric_parameter,
    tune,
)
from tunables.pipeline import (
    BoostTreeSpec,
    DummyStep,
    MLPSpec,
    NearestNeighborSpec,
    NormalizeStep,
    RandomForestSpec,
    SplineStep,
    ZeroVarianceStep,
)
from tunables.tuning import RESOLUTION_RULES, Finalizer, build_parameter_set, finalize


@pytest.fixture
def sample_data():
    """10 rows, 5 numeric predictors."""
    rng = np.random.default_rng(42)
    return pd.DataFrame(rng.normal(size=(10, 5)), columns=[f"x{i}" for i in range(1, 6)])


@pytest.fixture
def forest_pipeline():
    return [NormalizeStep(), RandomForestSpec(mtry=tune(), trees=tune())]


class TestFinalizer:
    """Test Finalizer and finalize()."""

    def test_mtry_resolved_from_predictors(self, sample_data, forest_pipeline):
        """mtry is bounded by the number of columns reaching the model."""
        parameter_set = build_parameter_set(forest_pipeline)
        finalized = finalize(parameter_set, forest_pipeline, sample_data)

        assert finalized['mtry'].domain == NumericDomain(1, 5)
        assert finalized['trees'].domain == NumericDomain(1, 2000)
        assert finalized.is_finalized()
        assert finalized.ids == parameter_set.ids

    def test_input_set_not_modified(self, sample_data, forest_pipeline):
        parameter_set = build_parameter_set(forest_pipeline)
        finalize(parameter_set, forest_pipeline, sample_data)

        assert parameter_set['mtry'].domain == NumericDomain(1, UNKNOWN)

    def test_finalize_is_idempotent(self, sample_data, forest_pipeline):
        """Finalizing a finalized set returns an equal set."""
        finalized = finalize(build_parameter_set(forest_pipeline), forest_pipeline, sample_data)

        assert finalize(finalized, forest_pipeline, sample_data) == finalized

    def test_resolved_set_skips_execution(self, forest_pipeline):
        """Nothing runs when no bound is unknown, so even empty data is accepted."""
        parameter_set = build_parameter_set([RandomForestSpec(trees=tune())])
        result = finalize(parameter_set, forest_pipeline, pd.DataFrame())

        assert result == parameter_set
        assert result is not parameter_set

    def test_zero_variance_columns_removed(self, sample_data):
        """Bounds follow the shape after earlier stages, not the raw data."""
        data = sample_data.assign(constant=1.0)
        stages = [ZeroVarianceStep(), RandomForestSpec(mtry=tune())]

        finalized = finalize(build_parameter_set(stages), stages, data)

        assert finalized['mtry'].domain == NumericDomain(1, 5)

    @pytest.mark.parametrize("one_hot,expected", [(False, 4), (True, 5)])
    def test_dummy_encoding_widens_data(self, one_hot, expected):
        data = pd.DataFrame({
            'a': np.arange(9, dtype=float),
            'b': np.arange(9, dtype=float) ** 2,
            'color': ['red', 'green', 'blue'] * 3,
        })
        stages = [DummyStep(one_hot=one_hot), RandomForestSpec(mtry=tune())]

        finalized = finalize(build_parameter_set(stages), stages, data)

        assert finalized['mtry'].domain == NumericDomain(1, expected)

    def test_each_stage_resolved_from_its_own_input(self, sample_data):
        """mtry before and after a zv step resolves to the width each model receives."""
        data = sample_data.assign(constant=1.0)
        stages = [
            RandomForestSpec(mtry=tune('rf mtry')),
            ZeroVarianceStep(),
            BoostTreeSpec(mtry=tune('boost mtry'), id='boost'),
        ]

        finalized = finalize(build_parameter_set(stages), stages, data)

        assert finalized['rf mtry'].domain == NumericDomain(1, 6)
        assert finalized['boost mtry'].domain == NumericDomain(1, 5)

    def test_repeated_stages_without_ids(self, sample_data):
        """Stages of the same class are told apart by position."""
        data = sample_data.assign(constant=1.0)
        stages = [
            NormalizeStep(),
            NearestNeighborSpec(neighbors=tune('first')),
            ZeroVarianceStep(),
            NormalizeStep(),
            RandomForestSpec(mtry=tune()),
        ]

        finalized = finalize(build_parameter_set(stages), stages, data)

        assert finalized['first'].domain == NumericDomain(1, 10)
        assert finalized['mtry'].domain == NumericDomain(1, 5)

    def test_outcomes_excluded(self, sample_data, forest_pipeline):
        data = sample_data.assign(y=np.arange(10.0))
        finalized = finalize(build_parameter_set(forest_pipeline), forest_pipeline, data, outcomes=['y'])

        assert finalized['mtry'].domain == NumericDomain(1, 5)

    def test_missing_outcome_column(self, sample_data, forest_pipeline):
        with pytest.raises(ValueError, match="Missing outcome columns"):
            finalize(build_parameter_set(forest_pipeline), forest_pipeline, sample_data, outcomes=['y'])

    def test_neighbors_bounded_by_rows(self, sample_data):
        stages = [NearestNeighborSpec(neighbors=tune())]
        finalized = finalize(build_parameter_set(stages), stages, sample_data)

        assert finalized['neighbors'].domain == NumericDomain(1, 10)

    def test_batch_size_in_log2_units(self):
        """Resolved bounds of transformed parameters are stored transformed."""
        data = pd.DataFrame({'x': np.arange(100.0), 'z': np.arange(100.0) % 7})
        stages = [MLPSpec(batch_size=tune(), hidden_units=tune())]

        finalized = finalize(build_parameter_set(stages), stages, data)
        descriptor = finalized['batch_size']

        assert descriptor.transform == LOG2
        assert descriptor.domain.lower == pytest.approx(np.log2(10))
        assert descriptor.domain.upper == pytest.approx(np.log2(33))
        lower, upper = descriptor.natural_range()
        assert lower == pytest.approx(10)
        assert upper == pytest.approx(33)

    def test_missing_rule_is_all_or_nothing(self, sample_data, forest_pipeline):
        """One unresolvable parameter fails the whole call and nothing is returned."""
        parameter_set = ParameterSet([
            (ParameterKey('rand_forest', 'mtry'),
             numeric_parameter('mtry', 1, UNKNOWN, integer=True, resolver='predictor_count')),
            (ParameterKey('rand_forest', 'custom'), numeric_parameter('custom', 0, UNKNOWN)),
        ])

        with pytest.raises(UnresolvableParameter) as exc_info:
            finalize(parameter_set, forest_pipeline, sample_data)

        assert 'custom' in str(exc_info.value)
        assert set(exc_info.value.parameter_ids) == {'mtry', 'custom'}
        assert parameter_set['mtry'].domain == NumericDomain(1, UNKNOWN)

    def test_source_stage_missing(self, sample_data):
        parameter_set = build_parameter_set([RandomForestSpec(mtry=tune())])

        with pytest.raises(UnresolvableParameter, match="not in the pipeline"):
            finalize(parameter_set, [NormalizeStep()], sample_data)

    def test_unknown_rule_name(self, sample_data, forest_pipeline):
        parameter_set = build_parameter_set(forest_pipeline)

        with pytest.raises(UnresolvableParameter, match="unknown resolution rule"):
            Finalizer(rules={}).finalize(parameter_set, forest_pipeline, sample_data)

    def test_tuned_shape_argument_blocks_execution(self, sample_data):
        """A stage whose output width is itself tuned cannot be executed."""
        stages = [SplineStep('x1', deg_free=tune()), RandomForestSpec(mtry=tune())]
        parameter_set = build_parameter_set(stages)

        with pytest.raises(UnresolvableParameter) as exc_info:
            finalize(parameter_set, stages, sample_data)

        assert exc_info.value.parameter_ids == ('deg_free',)

    def test_fixed_shape_argument_runs(self, sample_data):
        stages = [SplineStep('x1', deg_free=4), RandomForestSpec(mtry=tune())]
        finalized = finalize(build_parameter_set(stages), stages, sample_data)

        assert finalized['mtry'].domain == NumericDomain(1, 8)

    def test_custom_rules(self, sample_data, forest_pipeline):
        rules = dict(RESOLUTION_RULES, predictor_count=lambda shape: (1, shape.n_columns // 2))
        finalized = Finalizer(rules=rules).finalize(
            build_parameter_set(forest_pipeline), forest_pipeline, sample_data
        )

        assert finalized['mtry'].domain == NumericDomain(1, 2)

    def test_empty_resolved_range(self, sample_data, forest_pipeline):
        rules = {'predictor_count': lambda shape: (1, 0)}

        with pytest.raises(UnresolvableParameter, match="is empty"):
            finalize(build_parameter_set(forest_pipeline), forest_pipeline, sample_data, rules=rules)

    def test_invalid_sample_data(self, forest_pipeline):
        parameter_set = build_parameter_set(forest_pipeline)

        with pytest.raises(ValueError):
            finalize(parameter_set, forest_pipeline, sample_data=[[1, 2, 3]])

    def test_logs_resolved_parameters(self, sample_data, forest_pipeline, caplog):
        caplog.set_level(logging.INFO, logger="tunables")
        finalize(build_parameter_set(forest_pipeline), forest_pipeline, sample_data)

        assert "Finalized 1 parameter(s)" in caplog.text
