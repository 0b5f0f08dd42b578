"""
Abstract pipeline stage for the tunables package.

Defines the contract every preprocessing step and model specification
implements so the registry builder can enumerate its arguments and the
finalizer can run it once against sample data.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple
import pandas as pd

from ..errors import UnresolvableParameter
from ..params.descriptor import ParameterDescriptor
from ..params.placeholder import Placeholder, is_placeholder
from ..utils.logging import LoggingMixin


@dataclass(frozen=True)
class ResolvedShape:
    """
    Shape of the data a stage produces.

    Attributes:
        n_rows: Number of rows after the stage ran
        n_columns: Number of columns after the stage ran
        columns: Column names after the stage ran
        data: The transformed frame, handed to the next stage
    """

    n_rows: int
    n_columns: int
    columns: Tuple[str, ...] = ()
    data: Optional[pd.DataFrame] = field(default=None, compare=False, repr=False)

    @classmethod
    def from_frame(cls, data: pd.DataFrame) -> "ResolvedShape":
        return cls(
            n_rows=len(data),
            n_columns=data.shape[1],
            columns=tuple(str(column) for column in data.columns),
            data=data,
        )


class PipelineStage(ABC, LoggingMixin):
    """
    Abstract base class for all pipeline stages.

    Subclasses set ``component`` and implement ``transform``. Arguments
    holding a ``tune()`` placeholder are reported by ``list_arguments`` and
    become entries of the pipeline's parameter set. Arguments listed in
    ``shape_arguments`` change the output shape, so a stage cannot run while
    any of them is still a placeholder.
    """

    component: str = "stage"
    shape_arguments: Tuple[str, ...] = ()

    def __init__(self, id: Optional[str] = None, **arguments: Any) -> None:
        """
        Initialize pipeline stage.

        Args:
            id: Stage id used as the source of its parameters (defaults to
                the component name)
            **arguments: Stage arguments, concrete values or placeholders
        """
        self.arguments: Dict[str, Any] = dict(arguments)
        self.id = id or self.default_id()

    def default_id(self) -> str:
        return self.component

    def list_arguments(self) -> Dict[str, Any]:
        """
        Enumerate stage arguments in declaration order.

        Returns:
            Mapping of argument name to value or placeholder
        """
        return dict(self.arguments)

    def placeholders(self) -> Dict[str, Placeholder]:
        """Arguments currently marked for tuning."""
        return {name: value for name, value in self.arguments.items() if is_placeholder(value)}

    def tunable(self) -> Dict[str, ParameterDescriptor]:
        """
        Stage-specific descriptors that take precedence over the catalog.

        Returns:
            Mapping of argument name to descriptor (empty by default)
        """
        return {}

    def set_arguments(self, **arguments: Any) -> "PipelineStage":
        """
        Update stage arguments, e.g. to bind tuned values.

        Raises:
            ValueError: If an argument is not defined for this stage
        """
        unknown_args = sorted(set(arguments) - set(self.arguments))
        if unknown_args:
            raise ValueError(f"Unknown argument(s) for {self.component}: {', '.join(unknown_args)}")
        self.arguments.update(arguments)
        self.log_debug(f"Updated arguments of stage '{self.id}': {arguments}")
        return self

    def execute(self, sample_data: pd.DataFrame) -> ResolvedShape:
        """
        Run the stage against sample data.

        Args:
            sample_data: Data produced by the preceding stages

        Returns:
            ResolvedShape describing (and carrying) the stage output

        Raises:
            UnresolvableParameter: If a shape-determining argument is still a placeholder
            ValueError: If the input is not a non-empty DataFrame
        """
        self.validate_inputs(sample_data)

        blocked = [name for name in self.shape_arguments if is_placeholder(self.arguments.get(name))]
        if blocked:
            raise UnresolvableParameter(
                f"Stage '{self.id}' cannot run while {', '.join(blocked)} "
                f"{'is' if len(blocked) == 1 else 'are'} marked for tuning; its output "
                f"shape depends on {'it' if len(blocked) == 1 else 'them'}. "
                f"Set the parameter ranges with update() instead of finalizing.",
                blocked,
            )

        result = self.transform(sample_data)
        return ResolvedShape.from_frame(result)

    @abstractmethod
    def transform(self, data: pd.DataFrame) -> pd.DataFrame:
        """
        Apply the stage to a frame.

        Args:
            data: Input frame

        Returns:
            Output frame
        """
        pass

    def validate_inputs(self, data: pd.DataFrame) -> None:
        """
        Validate input data format.

        Raises:
            ValueError: If inputs are invalid
        """
        if not isinstance(data, pd.DataFrame):
            raise ValueError("Sample data must be a pandas DataFrame")

        if data.empty:
            raise ValueError("Sample data cannot be empty")

    def __repr__(self) -> str:
        args = ", ".join(f"{name}={value!r}" for name, value in self.arguments.items())
        prefix = f"id={self.id!r}"
        return f"{self.__class__.__name__}({prefix}{', ' + args if args else ''})"
