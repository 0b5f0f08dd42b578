"""
Registry builder: scan pipeline stages for placeholders.

Every argument holding a ``tune()`` marker becomes one entry of the
resulting ParameterSet, described by the stage's own ``tunable()`` override
or the canonical catalog.
"""

from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..params.catalog import ParameterCatalog, default_catalog
from ..params.descriptor import ParameterDescriptor
from ..params.parameter_set import ParameterKey, ParameterSet
from ..params.placeholder import is_placeholder
from ..utils.logging import LoggingMixin


def stage_id(stage: Any) -> str:
    """Id of a stage, falling back to its class name for plain collaborators."""
    return getattr(stage, "id", None) or type(stage).__name__


def stage_ids(stages: Sequence[Any]) -> List[str]:
    """
    Unique source ids for a stage sequence.

    Repeated ids are numbered by position, so two ``NormalizeStep()`` stages
    become ``normalize`` and ``normalize_2``. Builder and finalizer both use
    this, so parameter sources always match the executed stages.
    """
    ids: List[str] = []
    seen = set()
    for stage in stages:
        base = stage_id(stage)
        candidate, counter = base, 1
        while candidate in seen:
            counter += 1
            candidate = f"{base}_{counter}"
        seen.add(candidate)
        ids.append(candidate)
    return ids


class ParameterSetBuilder(LoggingMixin):
    """
    Builds parameter sets from pipeline stages.

    Entries are ordered by stage traversal, then by argument order within a
    stage, so repeated builds over unchanged stages are equal.
    """

    def __init__(self, catalog: Optional[ParameterCatalog] = None) -> None:
        """
        Initialize builder.

        Args:
            catalog: Default descriptors by argument name (None for the
                built-in catalog)
        """
        self.catalog = catalog if catalog is not None else default_catalog()

    def build(self, stages: Sequence[Any]) -> ParameterSet:
        """
        Build the parameter set of a pipeline.

        Args:
            stages: Pipeline stages in execution order; each exposes
                ``list_arguments()`` and optionally ``tunable()``

        Returns:
            ParameterSet with one entry per placeholder

        Raises:
            UnknownParameterKind: If a placeholder has no descriptor
            ParameterConflict: If two stages declare the same parameter id
        """
        entries: List[Tuple[ParameterKey, ParameterDescriptor]] = []
        sources = stage_ids(stages)

        for stage, source in zip(stages, sources):
            entries.extend(self._scan_stage(stage, source))

        parameter_set = ParameterSet(entries)
        self.log_info(
            f"Built parameter set with {len(parameter_set)} parameter(s) from {len(sources)} stage(s)"
        )
        return parameter_set

    def _scan_stage(self, stage: Any, source: str) -> List[Tuple[ParameterKey, ParameterDescriptor]]:
        """Synthesize descriptors for the placeholders of one stage."""
        overrides: Dict[str, ParameterDescriptor] = {}
        if hasattr(stage, "tunable"):
            overrides = dict(stage.tunable() or {})

        found = []
        for name, value in stage.list_arguments().items():
            if not is_placeholder(value):
                continue

            template = overrides.get(name)
            if template is None:
                template = self.catalog.get(name, source)

            descriptor = replace(template, name=name, label=value.identifier or name)
            key = ParameterKey(source=source, name=name, identifier=value.identifier)
            self.log_debug(f"Stage '{source}': {key.id} -> {descriptor.kind.value} {descriptor.domain}")
            found.append((key, descriptor))

        return found


def build_parameter_set(
    stages: Sequence[Any],
    catalog: Optional[ParameterCatalog] = None
) -> ParameterSet:
    """
    Convenience function for building a pipeline's parameter set.

    Args:
        stages: Pipeline stages in execution order
        catalog: Default descriptors (None for the built-in catalog)

    Returns:
        ParameterSet
    """
    return ParameterSetBuilder(catalog=catalog).build(stages)
