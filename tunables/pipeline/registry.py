"""
Stage registry: central catalog of stage classes by component name.

Used to build pipelines from JSON configuration files.
"""

from typing import Any, Dict, List, Mapping, Sequence, Type

from ..errors import UnknownStageComponent
from ..params.placeholder import tune
from ..utils.logging import get_logger
from .base_stage import PipelineStage

logger = get_logger("registry")


class StageRegistry:
    """
    Registry for stage classes.

    Usage:
        @StageRegistry.register
        class MyStep(PipelineStage):
            component = "my_step"
            ...
    """

    _stages: Dict[str, Type[PipelineStage]] = {}

    @classmethod
    def register(cls, stage_class: Type[PipelineStage]) -> Type[PipelineStage]:
        """Decorator to register a stage class under its component name."""
        component = stage_class.component
        if component in cls._stages and cls._stages[component] is not stage_class:
            logger.warning(
                "Stage component '%s' re-registered: %s -> %s",
                component, cls._stages[component].__name__, stage_class.__name__
            )
        cls._stages[component] = stage_class
        return stage_class

    @classmethod
    def get(cls, component: str) -> Type[PipelineStage]:
        """
        Get a stage class by component name.

        Raises:
            UnknownStageComponent: If the component is not registered
        """
        if component not in cls._stages:
            raise UnknownStageComponent(component, sorted(cls._stages))
        return cls._stages[component]

    @classmethod
    def list_stages(cls) -> List[str]:
        return sorted(cls._stages)


def register_stage(stage_class: Type[PipelineStage]) -> Type[PipelineStage]:
    """Shortcut for StageRegistry.register."""
    return StageRegistry.register(stage_class)


def _decode_argument(value: Any) -> Any:
    # {"tune": null} or {"tune": "<identifier>"} stands for a placeholder
    if isinstance(value, Mapping) and set(value) == {"tune"}:
        return tune(value["tune"])
    return value


def stage_from_config(config: Mapping[str, Any]) -> PipelineStage:
    """
    Build one stage from a configuration mapping.

    Args:
        config: Mapping with ``component``, optional ``id`` and ``args``

    Returns:
        Stage instance

    Example:
        >>> stage_from_config({"component": "rand_forest", "args": {"mtry": {"tune": None}}})
        RandomForestSpec(id='rand_forest', mtry=tune(), ...)
    """
    if "component" not in config:
        raise ValueError(f"Stage configuration is missing 'component': {dict(config)}")
    stage_class = StageRegistry.get(config["component"])
    args = {name: _decode_argument(value) for name, value in (config.get("args") or {}).items()}
    return stage_class(id=config.get("id"), **args)


def pipeline_from_config(config: Mapping[str, Any]) -> List[PipelineStage]:
    """Build the ordered stage list from a ``{"stages": [...]}`` mapping."""
    stage_configs: Sequence[Mapping[str, Any]] = config.get("stages", [])
    if not stage_configs:
        raise ValueError("Pipeline configuration must define at least one stage")
    stages = [stage_from_config(stage_config) for stage_config in stage_configs]
    logger.info("Loaded pipeline with %d stage(s): %s", len(stages), [stage.id for stage in stages])
    return stages
