"""
Preprocessing stages.

Each step transforms a pandas DataFrame of predictors. Steps whose output
width depends on an argument (spline degrees of freedom, number of PCA
components, dummy encoding) declare it in ``shape_arguments``.
"""

from typing import List, Optional, Sequence
import pandas as pd
import numpy as np

from .base_stage import PipelineStage
from .registry import register_stage


def _select_numeric(data: pd.DataFrame, columns: Optional[Sequence[str]]) -> List[str]:
    """Resolve the column selection of a step, defaulting to all numeric columns."""
    if columns is None:
        return list(data.select_dtypes(include=[np.number]).columns)

    missing = [column for column in columns if column not in data.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")
    return list(columns)


@register_stage
class NormalizeStep(PipelineStage):
    """Center and scale numeric columns to zero mean and unit variance."""

    component = "normalize"

    def __init__(self, columns: Optional[Sequence[str]] = None, id: Optional[str] = None) -> None:
        super().__init__(id=id, columns=columns)

    def transform(self, data: pd.DataFrame) -> pd.DataFrame:
        result = data.copy()
        selected = _select_numeric(result, self.arguments['columns'])
        if not selected:
            return result

        values = result[selected].astype(float)
        means = values.mean()
        stds = values.std(ddof=1).replace(0.0, 1.0).fillna(1.0)
        result[selected] = (values - means) / stds
        return result


@register_stage
class ZeroVarianceStep(PipelineStage):
    """Drop columns holding a single distinct value."""

    component = "zv"

    def __init__(self, id: Optional[str] = None) -> None:
        super().__init__(id=id)

    def transform(self, data: pd.DataFrame) -> pd.DataFrame:
        constant = [column for column in data.columns if data[column].nunique(dropna=False) <= 1]
        if constant:
            self.log_debug(f"Dropping zero-variance columns: {constant}")
        return data.drop(columns=constant)


@register_stage
class DummyStep(PipelineStage):
    """
    Encode categorical columns as indicator columns.

    With ``one_hot=False`` the first level of each column is dropped
    (reference-cell encoding), so the output width depends on ``one_hot``.
    """

    component = "dummy"
    shape_arguments = ("one_hot",)

    def __init__(
        self,
        columns: Optional[Sequence[str]] = None,
        one_hot: bool = False,
        id: Optional[str] = None
    ) -> None:
        super().__init__(id=id, columns=columns, one_hot=one_hot)

    def transform(self, data: pd.DataFrame) -> pd.DataFrame:
        columns = self.arguments['columns']
        if columns is None:
            columns = list(data.select_dtypes(include=['object', 'category', 'bool']).columns)
        else:
            missing = [column for column in columns if column not in data.columns]
            if missing:
                raise ValueError(f"Missing required columns: {missing}")

        if not columns:
            return data.copy()

        return pd.get_dummies(
            data,
            columns=list(columns),
            drop_first=not self.arguments['one_hot'],
            dtype=float
        )


@register_stage
class SplineStep(PipelineStage):
    """
    Expand one numeric column into a natural-cubic-style spline basis.

    The basis has ``deg_free`` columns: the linear term plus truncated cubic
    terms at interior quantile knots. The source column is replaced.
    """

    component = "ns"
    shape_arguments = ("deg_free",)

    def __init__(self, column: str, deg_free: int = 3, id: Optional[str] = None) -> None:
        super().__init__(id=id, column=column, deg_free=deg_free)

    def default_id(self) -> str:
        return f"{self.component}_{self.arguments['column']}"

    def transform(self, data: pd.DataFrame) -> pd.DataFrame:
        column = self.arguments['column']
        deg_free = self.arguments['deg_free']

        if column not in data.columns:
            raise ValueError(f"Missing required columns: {[column]}")
        if isinstance(deg_free, bool) or not isinstance(deg_free, (int, np.integer)) or deg_free < 1:
            raise ValueError(f"deg_free must be a positive integer, got {deg_free!r}")

        x = data[column].astype(float).to_numpy()
        n_knots = int(deg_free) - 1
        knots = np.quantile(x, np.linspace(0, 1, n_knots + 2)[1:-1]) if n_knots else np.array([])

        basis = {f"{column}_ns_1": x}
        for i, knot in enumerate(knots, start=2):
            basis[f"{column}_ns_{i}"] = np.clip(x - knot, 0, None) ** 3

        expanded = pd.DataFrame(basis, index=data.index)
        return pd.concat([data.drop(columns=[column]), expanded], axis=1)


@register_stage
class PCAStep(PipelineStage):
    """
    Replace numeric columns with their leading principal component scores.

    ``num_comp=0`` leaves the data untouched; requests beyond the rank of
    the data are capped.
    """

    component = "pca"
    shape_arguments = ("num_comp",)

    def __init__(
        self,
        columns: Optional[Sequence[str]] = None,
        num_comp: int = 5,
        id: Optional[str] = None
    ) -> None:
        super().__init__(id=id, columns=columns, num_comp=num_comp)

    def transform(self, data: pd.DataFrame) -> pd.DataFrame:
        num_comp = self.arguments['num_comp']
        if isinstance(num_comp, bool) or not isinstance(num_comp, (int, np.integer)) or num_comp < 0:
            raise ValueError(f"num_comp must be a non-negative integer, got {num_comp!r}")

        selected = _select_numeric(data, self.arguments['columns'])
        if num_comp == 0 or not selected:
            return data.copy()

        values = data[selected].astype(float).to_numpy()
        centered = values - values.mean(axis=0)
        _, _, vt = np.linalg.svd(centered, full_matrices=False)

        n_components = min(int(num_comp), vt.shape[0])
        scores = centered @ vt[:n_components].T
        components = pd.DataFrame(
            scores,
            index=data.index,
            columns=[f"PC{i}" for i in range(1, n_components + 1)]
        )
        return pd.concat([data.drop(columns=selected), components], axis=1)
