"""
Pipeline stages: preprocessing steps and model specifications.

Includes:
- base_stage: PipelineStage contract and ResolvedShape
- registry: Stage registry and JSON pipeline loading
- steps: Reference preprocessing steps
- models: Reference model specifications
"""

from .base_stage import PipelineStage, ResolvedShape
from .registry import StageRegistry, register_stage, stage_from_config, pipeline_from_config
from .steps import NormalizeStep, ZeroVarianceStep, DummyStep, SplineStep, PCAStep
from .models import (
    ModelSpec,
    RandomForestSpec,
    BoostTreeSpec,
    NearestNeighborSpec,
    LinearRegSpec,
    MLPSpec,
)

__all__ = [
    'PipelineStage',
    'ResolvedShape',
    'StageRegistry',
    'register_stage',
    'stage_from_config',
    'pipeline_from_config',
    'NormalizeStep',
    'ZeroVarianceStep',
    'DummyStep',
    'SplineStep',
    'PCAStep',
    'ModelSpec',
    'RandomForestSpec',
    'BoostTreeSpec',
    'NearestNeighborSpec',
    'LinearRegSpec',
    'MLPSpec',
]
