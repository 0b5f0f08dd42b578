"""
Tests for pipeline stages, the stage registry and binding tuned values.
"""

import pytest
import pandas as pd
import numpy as np

from tunables.errors import UnknownStageComponent, UnresolvableParameter
from tunables.params import tune
from tunables.pipeline import (
    BoostTreeSpec,
    DummyStep,
    LinearRegSpec,
    NormalizeStep,
    PCAStep,
    RandomForestSpec,
    ResolvedShape,
    SplineStep,
    StageRegistry,
    ZeroVarianceStep,
    pipeline_from_config,
    stage_from_config,
)
from tunables.tuning import bind_parameters


@pytest.fixture
def sample_data():
    """Numeric and categorical predictors."""
    rng = np.random.default_rng(0)
    n = 30
    return pd.DataFrame({
        'longitude': rng.uniform(-93.7, -93.5, n),
        'latitude': rng.uniform(41.9, 42.1, n),
        'area': rng.normal(1500, 300, n),
        'style': rng.choice(['ranch', 'colonial', 'split'], n),
    })


class TestPreprocessingSteps:
    """Test the reference preprocessing steps."""

    def test_normalize(self, sample_data):
        result = NormalizeStep().transform(sample_data)

        assert np.allclose(result[['longitude', 'latitude', 'area']].mean(), 0.0)
        assert np.allclose(result[['longitude', 'latitude', 'area']].std(ddof=1), 1.0)
        assert list(result['style']) == list(sample_data['style'])

    def test_normalize_constant_column(self):
        data = pd.DataFrame({'a': [2.0, 2.0, 2.0], 'b': [1.0, 2.0, 3.0]})
        result = NormalizeStep().transform(data)

        assert np.allclose(result['a'], 0.0)

    def test_normalize_missing_column(self, sample_data):
        with pytest.raises(ValueError, match="Missing required columns"):
            NormalizeStep(columns=['price']).transform(sample_data)

    def test_zero_variance(self, sample_data):
        data = sample_data.assign(constant='x')
        result = ZeroVarianceStep().transform(data)

        assert 'constant' not in result.columns
        assert result.shape[1] == sample_data.shape[1]

    def test_dummy_reference_encoding(self, sample_data):
        result = DummyStep().transform(sample_data)

        assert 'style' not in result.columns
        assert result.shape[1] == 3 + 2

    def test_dummy_one_hot(self, sample_data):
        result = DummyStep(one_hot=True).transform(sample_data)

        assert result.shape[1] == 3 + 3
        assert np.allclose(result.filter(like='style_').sum(axis=1), 1.0)

    def test_spline_basis(self, sample_data):
        """The source column is replaced by deg_free basis columns."""
        result = SplineStep('longitude', deg_free=3).transform(sample_data)

        assert 'longitude' not in result.columns
        assert [c for c in result.columns if c.startswith('longitude_ns_')] == [
            'longitude_ns_1', 'longitude_ns_2', 'longitude_ns_3'
        ]
        assert result.shape == (30, 3 + 3)

    def test_spline_invalid_degrees(self, sample_data):
        with pytest.raises(ValueError, match="deg_free"):
            SplineStep('longitude', deg_free=0).transform(sample_data)

    def test_pca(self, sample_data):
        result = PCAStep(num_comp=2).transform(sample_data)

        assert list(result.columns) == ['style', 'PC1', 'PC2']

    def test_pca_capped_at_rank(self):
        data = pd.DataFrame(np.arange(12.0).reshape(3, 4) ** 2, columns=list('abcd'))
        result = PCAStep(num_comp=10).transform(data)

        assert result.shape == (3, 3)

    def test_pca_zero_components(self, sample_data):
        result = PCAStep(num_comp=0).transform(sample_data)

        assert result.shape == sample_data.shape


class TestPipelineStage:
    """Test the stage contract shared by steps and models."""

    def test_default_ids(self):
        assert NormalizeStep().id == 'normalize'
        assert SplineStep('latitude').id == 'ns_latitude'
        assert RandomForestSpec(id='rf').id == 'rf'

    def test_list_arguments_and_placeholders(self):
        stage = RandomForestSpec(mtry=tune(), trees=500)

        assert list(stage.list_arguments()) == ['mtry', 'trees', 'min_n']
        assert stage.placeholders() == {'mtry': tune()}

    def test_execute_returns_shape(self, sample_data):
        shape = SplineStep('area', deg_free=2).execute(sample_data)

        assert isinstance(shape, ResolvedShape)
        assert (shape.n_rows, shape.n_columns) == (30, 5)
        assert 'area_ns_2' in shape.columns
        assert shape.data is not None

    def test_execute_blocked_by_tuned_shape_argument(self, sample_data):
        stage = PCAStep(num_comp=tune())

        with pytest.raises(UnresolvableParameter) as exc_info:
            stage.execute(sample_data)

        assert exc_info.value.parameter_ids == ('num_comp',)

    def test_execute_with_tuned_model_argument(self, sample_data):
        """Model arguments do not change the shape, so models run with placeholders."""
        shape = RandomForestSpec(mtry=tune()).execute(sample_data)

        assert shape.n_columns == 4

    def test_execute_rejects_empty_data(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            NormalizeStep().execute(pd.DataFrame())

    def test_set_arguments(self):
        stage = RandomForestSpec(mtry=tune())

        assert stage.set_arguments(mtry=3) is stage
        assert stage.list_arguments()['mtry'] == 3

        with pytest.raises(ValueError, match="Unknown argument"):
            stage.set_arguments(depth=3)

    def test_model_engines(self):
        assert RandomForestSpec().engine == 'ranger'
        assert BoostTreeSpec(engine='lightgbm').engine == 'lightgbm'
        assert LinearRegSpec().mode == 'regression'

        with pytest.raises(ValueError, match="Engine"):
            RandomForestSpec(engine='xgboost')
        with pytest.raises(ValueError, match="mode"):
            RandomForestSpec(mode='survival')

    def test_repr(self):
        text = repr(RandomForestSpec(mtry=tune('m')))

        assert text.startswith("RandomForestSpec(id='rand_forest'")
        assert "mtry=tune('m')" in text
        assert text.endswith("engine='ranger')")


class TestStageRegistry:
    """Test component lookup and configuration loading."""

    def test_builtin_components(self):
        for component in ['normalize', 'zv', 'dummy', 'ns', 'pca',
                          'rand_forest', 'boost_tree', 'nearest_neighbor', 'linear_reg', 'mlp']:
            assert component in StageRegistry.list_stages()

        assert StageRegistry.get('rand_forest') is RandomForestSpec

    def test_unknown_component(self):
        with pytest.raises(UnknownStageComponent) as exc_info:
            StageRegistry.get('svm')

        assert 'rand_forest' in str(exc_info.value)

    def test_stage_from_config(self):
        """{"tune": ...} entries become placeholders."""
        stage = stage_from_config({
            'component': 'ns',
            'args': {'column': 'longitude', 'deg_free': {'tune': 'longitude df'}},
        })

        assert isinstance(stage, SplineStep)
        assert stage.id == 'ns_longitude'
        assert stage.list_arguments()['deg_free'] == tune('longitude df')

    def test_pipeline_from_config(self):
        stages = pipeline_from_config({'stages': [
            {'component': 'normalize'},
            {'component': 'rand_forest', 'id': 'rf', 'args': {'mtry': {'tune': None}, 'trees': 500}},
        ]})

        assert [stage.id for stage in stages] == ['normalize', 'rf']
        assert stages[1].list_arguments()['mtry'] == tune()
        assert stages[1].list_arguments()['trees'] == 500

    def test_invalid_configs(self):
        with pytest.raises(ValueError, match="at least one stage"):
            pipeline_from_config({'stages': []})
        with pytest.raises(ValueError, match="missing 'component'"):
            stage_from_config({'args': {}})


class TestBindParameters:
    """Test binding tuned values back into stages."""

    def test_bind_values(self):
        stages = [
            SplineStep('longitude', deg_free=tune('longitude df')),
            RandomForestSpec(mtry=tune(), trees=tune()),
        ]
        bound = bind_parameters(stages, {'longitude df': 4, 'mtry': 3, 'trees': 800})

        assert bound[0].list_arguments()['deg_free'] == 4
        assert bound[1].list_arguments()['mtry'] == 3
        assert bound[1].list_arguments()['trees'] == 800
        assert not bound[1].placeholders()

        # Originals keep their placeholders
        assert stages[1].list_arguments()['mtry'] == tune()

    def test_identifiers_bind_each_stage(self):
        """Each id reaches only the stage that declares it."""
        stages = [
            RandomForestSpec(mtry=tune('rf mtry')),
            BoostTreeSpec(mtry=tune('boost mtry'), id='boost'),
        ]
        bound = bind_parameters(stages, {'rf mtry': 6, 'boost mtry': 5})

        assert [stage.list_arguments()['mtry'] for stage in bound] == [6, 5]

    def test_partial_binding(self):
        bound = bind_parameters([RandomForestSpec(mtry=tune(), trees=tune())], {'mtry': 2})

        assert bound[0].placeholders() == {'trees': tune()}

    def test_unused_value(self):
        with pytest.raises(ValueError, match="penalty"):
            bind_parameters([RandomForestSpec(mtry=tune())], {'mtry': 2, 'penalty': 0.1})
