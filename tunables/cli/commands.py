"""
CLI commands for building and finalizing parameter sets.

Pipelines are read from JSON files of the form::

    {"stages": [
        {"component": "normalize"},
        {"component": "rand_forest", "args": {"mtry": {"tune": null}, "trees": 500}}
    ]}

where ``{"tune": null}`` marks an argument for tuning and
``{"tune": "<identifier>"}`` adds an identifier.
"""

import typer
from typing import List, Optional
from pathlib import Path
import pandas as pd
import json

from ..params.catalog import default_catalog
from ..params.parameter_set import ParameterSet, describe
from ..pipeline.registry import StageRegistry, pipeline_from_config
from ..tuning.builder import build_parameter_set
from ..tuning.finalizer import finalize
from ..utils.logging import LoggingMixin


class RegistryWorkflow(LoggingMixin):
    """Loads pipelines and sample data from disk and runs the registry operations."""

    def load_pipeline(self, pipeline_file: str) -> list:
        """Read a pipeline JSON file into stage objects."""
        path = Path(pipeline_file)
        if not path.exists():
            raise FileNotFoundError(f"Pipeline file not found: {path}")

        with open(path, 'r') as f:
            config = json.load(f)

        self.log_info(f"Loading pipeline from {path}")
        return pipeline_from_config(config)

    def load_sample(self, data_file: str, sample_rows: Optional[int] = None) -> pd.DataFrame:
        """Read sample data from CSV or parquet, optionally keeping the first rows only."""
        path = Path(data_file)
        if not path.exists():
            raise FileNotFoundError(f"Data file not found: {path}")

        if path.suffix.lower() in ('.parquet', '.pq'):
            data = pd.read_parquet(path)
        elif path.suffix.lower() == '.csv':
            data = pd.read_csv(path)
        else:
            raise ValueError(f"Unsupported data file type '{path.suffix}'. Use .csv or .parquet")

        if sample_rows is not None:
            data = data.head(sample_rows)

        self.log_info(f"Loaded sample data with shape {data.shape} from {path}")
        return data

    def build(self, pipeline_file: str) -> ParameterSet:
        stages = self.load_pipeline(pipeline_file)
        return build_parameter_set(stages)

    def finalize(
        self,
        pipeline_file: str,
        data_file: str,
        outcomes: List[str],
        sample_rows: Optional[int] = None
    ) -> ParameterSet:
        stages = self.load_pipeline(pipeline_file)
        parameter_set = build_parameter_set(stages)
        sample = self.load_sample(data_file, sample_rows=sample_rows)
        return finalize(parameter_set, stages, sample, outcomes=outcomes)

    def save(self, parameter_set: ParameterSet, output_file: str) -> None:
        """Write the set's tabular view as JSON records."""
        output_path = Path(output_file)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        parameter_set.to_frame().to_json(output_path, orient='records', indent=2)
        self.log_info(f"Saved parameter set to {output_path}")


def describe_pipeline(
    pipeline_file: str = typer.Argument(..., help="Path to pipeline JSON file"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write the parameter set as JSON")
):
    """Build the parameter set of a pipeline and print it."""
    try:
        workflow = RegistryWorkflow()
        parameter_set = workflow.build(pipeline_file)
        typer.echo(describe(parameter_set))
        if output:
            workflow.save(parameter_set, output)

    except Exception as e:
        typer.echo(f"❌ Building parameter set failed: {e}", err=True)
        raise typer.Exit(1)


def finalize_pipeline(
    pipeline_file: str = typer.Argument(..., help="Path to pipeline JSON file"),
    data_file: str = typer.Argument(..., help="Sample data (.csv or .parquet)"),
    outcome: Optional[List[str]] = typer.Option(None, "--outcome", help="Outcome column(s) to exclude"),
    sample_rows: Optional[int] = typer.Option(None, help="Use only the first N rows of the data"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write the parameter set as JSON")
):
    """Build the parameter set of a pipeline and resolve data-dependent bounds."""
    try:
        workflow = RegistryWorkflow()
        parameter_set = workflow.finalize(
            pipeline_file,
            data_file,
            outcomes=list(outcome or []),
            sample_rows=sample_rows
        )
        typer.echo(describe(parameter_set))
        if output:
            workflow.save(parameter_set, output)

    except Exception as e:
        typer.echo(f"❌ Finalization failed: {e}", err=True)
        raise typer.Exit(1)


def show_catalog():
    """List the well-known parameters and their default domains."""
    typer.echo(default_catalog().to_frame().to_string(index=False))


def show_stages():
    """List the registered stage components."""
    for component in StageRegistry.list_stages():
        typer.echo(f"  {component:<18} {StageRegistry.get(component).__name__}")
