from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from figstudio.channels import ResolvedChannel, bind_channels, is_matrix_valued
from figstudio.dataset import Dataset, as_dataset
from figstudio.errors import ConfigurationError

# trace type -> channels that must resolve to a column, vector or literal
REQUIRED_CHANNELS: dict[str, tuple[str, ...]] = {
    "scatter": ("x", "y"),
    "line": ("x", "y"),
    "bar": ("x", "y"),
    "histogram": ("x",),
    "box": ("y",),
    "heatmap": ("z",),
    "contour": ("z",),
    "surface": ("z",),
    "scatter3d": ("x", "y", "z"),
}

TRACE_TYPES = tuple(REQUIRED_CHANNELS)
MATRIX_TYPES = ("heatmap", "contour", "surface")
THREE_D_TYPES = ("surface", "scatter3d")


@dataclass(frozen=True, eq=False)
class Trace:
    """
    One visual layer of a chart.

    Channels are already bound (see `bind_channels`), so a Trace carries
    concrete values and never refers back to a dataset lazily.
    """

    type: str
    channels: Mapping[str, ResolvedChannel]
    options: Mapping[str, Any] = field(default_factory=dict)
    dataset: Dataset | None = None

    def channel(self, name: str) -> ResolvedChannel | None:
        return self.channels.get(name)

    @property
    def name(self) -> str | None:
        return self.options.get("name")

    def __repr__(self) -> str:
        return f"<Trace {self.type} channels={list(self.channels)}>"


def default_trace_type(channels: Mapping[str, Any], dataset: Dataset | None) -> str:
    """heatmap if any channel is matrix-valued (or a matrix dataset supplies z), else scatter."""
    if any(is_matrix_valued(v) for v in channels.values() if v is not None):
        return "heatmap"
    if dataset is not None and dataset.is_matrix and channels.get("z") is None:
        return "heatmap"
    return "scatter"


def make_trace(
    type: str | None = None,
    data: Any = None,
    options: Mapping[str, Any] | None = None,
    **channels: Any,
) -> Trace:
    """
    Create a bound Trace.

    Args:
        type: One of TRACE_TYPES. Inferred with `default_trace_type` when omitted.
        data: Dataset (or anything `Dataset` accepts) that column references resolve against.
        options: Style options (mode, colors, symbols, sizes, name, opacity, or any plotly trace attribute).
        **channels: Channel mapping: x, y, z, color, symbol, size, text.

    Raises:
        ConfigurationError: for unknown trace types, a required channel with nothing bound
            to it, or a size channel bound to non-numeric data.
    """
    dataset = as_dataset(data)
    if type is None:
        type = default_trace_type(channels, dataset)
    if type not in REQUIRED_CHANNELS:
        raise ConfigurationError(
            f"Unknown trace type '{type}'", context={"known": list(TRACE_TYPES)}
        )

    mapping = dict(channels)
    if (
        type in MATRIX_TYPES
        and mapping.get("z") is None
        and dataset is not None
        and dataset.is_matrix
    ):
        mapping["z"] = dataset.matrix

    bound = bind_channels(mapping, dataset)
    missing = [name for name in REQUIRED_CHANNELS[type] if name not in bound]
    if missing:
        raise ConfigurationError(
            f"Trace type '{type}' requires channel(s) {', '.join(missing)}",
            context={"type": type, "missing": missing},
        )
    if type in MATRIX_TYPES and bound["z"].kind != "matrix":
        raise ConfigurationError(
            f"Trace type '{type}' requires a matrix-valued z channel",
            context={"type": type},
        )
    size = bound.get("size")
    if size is not None and size.is_data and size.scale != "continuous":
        raise ConfigurationError(
            f"Channel 'size' must be numeric, got {size.scale} data",
            context={"channel": "size", "column": size.label, "scale": size.scale},
        )
    return Trace(
        type=type,
        channels=MappingProxyType(bound),
        options=MappingProxyType(dict(options or {})),
        dataset=dataset,
    )
