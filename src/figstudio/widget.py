import datetime
import math
import warnings
from typing import Any, Iterable

import anywidget
import numpy as np
import traitlets

from figstudio.util import PARENT_PATH


def to_json(data: Any) -> Any:
    """
    Convert a figure (or any nested value) into JSON-compatible Python values.

    NaN and infinities become None, numpy arrays become (nested) lists, dates
    become ISO strings, and objects with a `for_json` method are unwrapped.
    """
    # Handle NaN at top level
    if isinstance(data, float):
        if math.isnan(data) or math.isinf(data):
            return None
        return data

    # Handle basic JSON-serializable types first since they're most common
    if isinstance(data, (str, int, bool)) or data is None:
        return data

    if isinstance(data, (datetime.date, datetime.datetime)):
        return data.isoformat()

    if isinstance(data, np.generic):
        return to_json(data.item())

    if isinstance(data, np.ndarray):
        if data.dtype.kind == "M":
            return [to_json(x) for x in data.astype(str).tolist()]
        return to_json(data.tolist())

    # Handle objects with custom serialization
    if hasattr(data, "for_json"):
        return to_json(data.for_json())

    if isinstance(data, dict):
        return {str(k): to_json(v) for k, v in data.items()}

    if isinstance(data, (list, tuple, set, frozenset)):
        return [to_json(x) for x in data]

    if isinstance(data, Iterable):
        if not hasattr(data, "__len__") and not hasattr(data, "__getitem__"):
            warnings.warn(
                "Potentially exhaustible iterator encountered: generator", UserWarning
            )
        return [to_json(x) for x in data]

    raise TypeError(f"Object of type {type(data)} is not JSON serializable")


class Widget(anywidget.AnyWidget):
    """A notebook widget that renders a plotly.js figure and re-renders when it changes."""

    _esm = PARENT_PATH / "js/widget.js"
    figure = traitlets.Dict().tag(sync=True)

    def __init__(self, figure: dict[str, Any]):
        super().__init__()
        self.figure = to_json(figure)

    def set_figure(self, figure: dict[str, Any]) -> None:
        self.figure = to_json(figure)
