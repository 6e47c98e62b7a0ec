from typing import Any, Mapping, Sequence

import numpy as np
import pandas as pd

from figstudio.errors import ConfigurationError


def _readonly(values: Any) -> np.ndarray:
    arr = np.array(values)
    arr.setflags(write=False)
    return arr


class Dataset:
    """
    A read-only data source for a chart: either named columns of equal length,
    or a single 2-D numeric matrix.

    Args:
        data: A dict of columns, a list of record dicts, a pandas DataFrame,
            or a 2-D array / nested list (matrix).
    """

    def __init__(self, data: Any) -> None:
        self._columns: dict[str, np.ndarray] = {}
        self._levels: dict[str, tuple] = {}
        self._ordered: dict[str, bool] = {}
        self._matrix: np.ndarray | None = None

        if isinstance(data, pd.DataFrame):
            self._from_frame(data)
        elif isinstance(data, Mapping):
            self._from_columns(data)
        elif _is_records(data):
            self._from_columns(
                {k: [row.get(k) for row in data] for k in _record_keys(data)}
            )
        else:
            matrix = np.asarray(data)
            if matrix.ndim != 2:
                raise ConfigurationError(
                    "Dataset must be tabular or a 2-D matrix",
                    context={"ndim": int(matrix.ndim)},
                )
            self._matrix = _readonly(matrix)

    def _from_frame(self, df: pd.DataFrame) -> None:
        for name in df.columns:
            series = df[name]
            key = str(name)
            if isinstance(series.dtype, pd.CategoricalDtype):
                self._levels[key] = tuple(series.cat.categories)
                self._ordered[key] = bool(series.cat.ordered)
                self._columns[key] = _readonly(series.astype(object).to_numpy())
            else:
                self._columns[key] = _readonly(series.to_numpy())

    def _from_columns(self, columns: Mapping[str, Any]) -> None:
        lengths = {}
        for name, values in columns.items():
            if isinstance(values, pd.Series) and isinstance(
                values.dtype, pd.CategoricalDtype
            ):
                self._levels[name] = tuple(values.cat.categories)
                self._ordered[name] = bool(values.cat.ordered)
                values = values.astype(object).to_numpy()
            arr = _readonly(values)
            if arr.ndim != 1:
                raise ConfigurationError(
                    f"Column '{name}' must be one-dimensional", context={"column": name}
                )
            self._columns[name] = arr
            lengths[name] = len(arr)
        if len(set(lengths.values())) > 1:
            raise ConfigurationError(
                "All dataset columns must have the same length",
                context={"lengths": lengths},
            )

    @property
    def is_matrix(self) -> bool:
        return self._matrix is not None

    @property
    def matrix(self) -> np.ndarray | None:
        return self._matrix

    @property
    def columns(self) -> list[str]:
        return list(self._columns)

    @property
    def nrows(self) -> int:
        if self._matrix is not None:
            return self._matrix.shape[0]
        return len(next(iter(self._columns.values()), ()))

    def has_column(self, name: str) -> bool:
        return name in self._columns

    def column(self, name: str) -> np.ndarray:
        if name not in self._columns:
            raise ConfigurationError(
                f"Column '{name}' not found in dataset",
                context={"column": name, "available": self.columns},
            )
        return self._columns[name]

    def levels(self, name: str) -> tuple | None:
        return self._levels.get(name)

    def ordered(self, name: str) -> bool:
        return self._ordered.get(name, False)

    def __getitem__(self, name: str) -> np.ndarray:
        return self.column(name)

    def __len__(self) -> int:
        return self.nrows

    def __repr__(self) -> str:
        if self._matrix is not None:
            return f"<Dataset matrix shape={self._matrix.shape}>"
        return f"<Dataset rows={self.nrows}, columns={self.columns}>"


def _is_records(data: Any) -> bool:
    return (
        isinstance(data, Sequence)
        and not isinstance(data, str)
        and len(data) > 0
        and all(isinstance(row, Mapping) for row in data)
    )


def _record_keys(records: Sequence[Mapping]) -> list[str]:
    keys: dict[str, None] = {}
    for row in records:
        keys.update(dict.fromkeys(row))
    return list(keys)


def as_dataset(data: Any) -> Dataset | None:
    """Coerce `data` to a Dataset; None and existing Datasets pass through unchanged."""
    if data is None or isinstance(data, Dataset):
        return data
    return Dataset(data)
