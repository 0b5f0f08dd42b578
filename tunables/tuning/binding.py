"""
Bind tuned values back into pipeline stages.
"""

import copy
from typing import Any, List, Mapping, Sequence

from ..params.placeholder import is_placeholder
from ..utils.logging import get_logger

logger = get_logger("binding")


def bind_parameters(stages: Sequence[Any], values: Mapping[str, Any]) -> List[Any]:
    """
    Replace placeholders with concrete values.

    Placeholders are matched by their effective id (identifier, or the
    argument name for anonymous markers), the same id the parameter has in
    the pipeline's ParameterSet. The given stages are not modified; bound
    copies are returned.

    Args:
        stages: Pipeline stages in execution order
        values: Parameter values keyed by id (e.g. from suggest_parameters)

    Returns:
        List of bound stage copies

    Raises:
        ValueError: If a value is given for an id no placeholder uses
    """
    bound = []
    used = set()

    for stage in stages:
        stage_copy = copy.deepcopy(stage)
        assignments = {}
        for name, value in stage_copy.list_arguments().items():
            if not is_placeholder(value):
                continue
            parameter_id = value.identifier or name
            if parameter_id in values:
                assignments[name] = values[parameter_id]
                used.add(parameter_id)
        if assignments:
            stage_copy.set_arguments(**assignments)
        bound.append(stage_copy)

    unused = sorted(set(values) - used)
    if unused:
        raise ValueError(f"No placeholder for parameter(s): {', '.join(unused)}")

    logger.debug("Bound %d parameter(s) into %d stage(s)", len(used), len(bound))
    return bound
