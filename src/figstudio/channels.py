from dataclasses import dataclass
from typing import Any, Literal, Mapping, Sequence

import numpy as np
import pandas as pd

from figstudio.dataset import Dataset
from figstudio.errors import ConfigurationError

CHANNELS = ("x", "y", "z", "color", "symbol", "size", "text")

Kind = Literal["literal", "vector", "matrix"]
Scale = Literal["categorical", "ordinal", "continuous"]


@dataclass(frozen=True)
class Col:
    """
    A symbolic reference to a dataset column, bound when a trace is created.

    Args:
        name: Column name.
        levels: Explicit level order for categorical data.
        ordered: Treat the column as ordered categorical data.
    """

    name: str
    levels: tuple | None = None
    ordered: bool | None = None

    def __repr__(self) -> str:
        return f"col({self.name!r})"


def col(name: str, levels: Sequence[Any] | None = None, ordered: bool | None = None) -> Col:
    """Reference a column of the chart's dataset by name."""
    return Col(name, tuple(levels) if levels is not None else None, ordered)


@dataclass(frozen=True, eq=False)
class ResolvedChannel:
    """A channel after binding: concrete values plus the semantic kind of the data."""

    name: str
    kind: Kind
    values: Any
    label: str | None = None
    scale: Scale | None = None
    levels: tuple | None = None

    @property
    def is_data(self) -> bool:
        return self.kind != "literal"

    def __repr__(self) -> str:
        return f"<ResolvedChannel {self.name}={self.label or self.kind} scale={self.scale}>"


def is_matrix_valued(value: Any) -> bool:
    if isinstance(value, (Col, str, bytes)) or value is None or np.isscalar(value):
        return False
    try:
        return np.ndim(value) == 2
    except ValueError:
        # ragged nested sequences
        return False


def _is_literal(value: Any) -> bool:
    return isinstance(value, (str, bytes, bool)) or np.isscalar(value)


def infer_scale(values: np.ndarray, levels: tuple | None = None, ordered: bool | None = None) -> Scale:
    if ordered:
        return "ordinal"
    if levels is not None:
        return "categorical"
    if values.dtype.kind in "iuf":
        return "continuous"
    if values.dtype.kind == "O":
        present = [v for v in values if v is not None and not _is_nan(v)]
        if present and all(
            isinstance(v, (int, float, np.number)) and not isinstance(v, bool)
            for v in present
        ):
            return "continuous"
    return "categorical"


def _is_nan(v: Any) -> bool:
    return isinstance(v, (float, np.floating)) and np.isnan(v)


def _bind_one(name: str, value: Any, dataset: Dataset | None) -> ResolvedChannel:
    if isinstance(value, Col):
        if dataset is None:
            raise ConfigurationError(
                f"Channel '{name}' references column '{value.name}' but no dataset was given",
                context={"channel": name, "column": value.name},
            )
        if dataset.is_matrix:
            raise ConfigurationError(
                f"Channel '{name}' references column '{value.name}' but the dataset is a matrix",
                context={"channel": name, "column": value.name},
            )
        values = dataset.column(value.name)
        levels = value.levels if value.levels is not None else dataset.levels(value.name)
        ordered = value.ordered if value.ordered is not None else dataset.ordered(value.name)
        return ResolvedChannel(
            name=name,
            kind="vector",
            values=values,
            label=value.name,
            scale=infer_scale(values, levels, ordered),
            levels=levels,
        )

    if _is_literal(value):
        return ResolvedChannel(name=name, kind="literal", values=value)

    label = str(value.name) if isinstance(value, pd.Series) and value.name is not None else None
    levels = None
    ordered = None
    if isinstance(value, pd.Series) and isinstance(value.dtype, pd.CategoricalDtype):
        levels = tuple(value.cat.categories)
        ordered = bool(value.cat.ordered)
        value = value.astype(object)

    values = np.asarray(value)
    if values.ndim == 2:
        return ResolvedChannel(
            name=name, kind="matrix", values=values, label=label, scale="continuous"
        )
    if values.ndim != 1:
        raise ConfigurationError(
            f"Channel '{name}' must be a literal, a column, a vector or a matrix",
            context={"channel": name, "ndim": int(values.ndim)},
        )
    return ResolvedChannel(
        name=name,
        kind="vector",
        values=values,
        label=label,
        scale=infer_scale(values, levels, ordered),
        levels=levels,
    )


def bind_channels(
    mapping: Mapping[str, Any], dataset: Dataset | None
) -> dict[str, ResolvedChannel]:
    """
    Resolve a channel mapping against a dataset.

    Column references are looked up in `dataset`, vectors and matrices are
    converted to numpy arrays, and scalars are kept as literals. Channels set
    to None are skipped.

    Returns:
        A dict from channel name to ResolvedChannel, in channel order.

    Raises:
        ConfigurationError: for unknown channels, unresolvable columns, or
            vector channels of different lengths.
    """
    unknown = [name for name in mapping if name not in CHANNELS]
    if unknown:
        raise ConfigurationError(
            f"Unknown channel(s): {', '.join(unknown)}",
            context={"known": list(CHANNELS)},
        )

    resolved = {
        name: _bind_one(name, mapping[name], dataset)
        for name in CHANNELS
        if mapping.get(name) is not None
    }

    lengths = {
        name: len(ch.values) for name, ch in resolved.items() if ch.kind == "vector"
    }
    if len(set(lengths.values())) > 1:
        raise ConfigurationError(
            "Vector channels of a trace must have the same length",
            context={"lengths": lengths},
        )
    return resolved
