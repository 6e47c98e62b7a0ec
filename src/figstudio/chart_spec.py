import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Sequence, TypeAlias, Union

from figstudio.channels import CHANNELS
from figstudio.dataset import Dataset, as_dataset
from figstudio.display import FigureItem
from figstudio.errors import ConfigurationError
from figstudio.figure import build_figure
from figstudio.layout import Layout
from figstudio.trace import (
    MATRIX_TYPES,
    REQUIRED_CHANNELS,
    Trace,
    default_trace_type,
    make_trace,
)

logger = logging.getLogger(__name__)

SpecInput: TypeAlias = Union[
    "ChartSpec",
    Trace,
    Sequence[Union["ChartSpec", Trace, dict[str, Any]]],
    dict[str, Any],
]


def _split_kwargs(kwargs: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    channels = {k: v for k, v in kwargs.items() if k in CHANNELS}
    options = {k: v for k, v in kwargs.items() if k not in CHANNELS}
    return channels, options


class ChartSpec(FigureItem):
    """
    A declarative description of a chart: a dataset reference, a top-level
    channel mapping inherited by new traces, an ordered sequence of traces
    and a layout.

    ChartSpecs are immutable: `dataset`, `channels`, `traces` and `layout` are
    read-only, and every step (`add_trace`, `update_layout`, `+`) returns a new
    ChartSpec and leaves the original untouched. A step that raises changes
    nothing. Only display preferences (`display_as`) and cached renderings are
    kept per instance.

    ChartSpecs compose with `+`: adding a Trace appends it, adding a dict
    merges layout options, and adding another ChartSpec appends its traces
    and merges its layout.
    """

    def __init__(
        self,
        dataset: Any = None,
        channels: Mapping[str, Any] | None = None,
        traces: Sequence[Trace] = (),
        layout: Layout | Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__()
        self._dataset = as_dataset(dataset)
        self._channels = MappingProxyType(dict(channels or {}))
        self._traces = tuple(traces)
        self._layout = layout if isinstance(layout, Layout) else Layout(layout)

    @property
    def dataset(self) -> Dataset | None:
        return self._dataset

    @property
    def channels(self) -> Mapping[str, Any]:
        return self._channels

    @property
    def traces(self) -> tuple[Trace, ...]:
        return self._traces

    @property
    def layout(self) -> Layout:
        return self._layout

    def _replace(self, **changes: Any) -> "ChartSpec":
        return ChartSpec(
            dataset=changes.get("dataset", self.dataset),
            channels=changes.get("channels", self.channels),
            traces=changes.get("traces", self.traces),
            layout=changes.get("layout", self.layout),
        )

    def add_trace(
        self,
        trace: Trace | str | None = None,
        *,
        type: str | None = None,
        data: Any = None,
        inherit: bool = True,
        options: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> "ChartSpec":
        """
        Return a new ChartSpec with one more trace.

        Args:
            trace: A ready-made Trace (appended as-is) or a trace type name.
            type: Trace type name, as an alternative to passing it positionally.
            data: Dataset for this trace only; defaults to the chart's dataset.
            inherit: Inherit the chart's top-level channel mapping for unset channels.
            options: Style options for the trace.
            **kwargs: Channel overrides (x, y, z, color, symbol, size, text; None removes
                an inherited channel) and further style options.
        """
        if isinstance(trace, Trace):
            if type is not None or data is not None or options or kwargs:
                raise ConfigurationError(
                    "A ready-made Trace cannot be combined with type, data or channel overrides"
                )
            new_trace = trace
        else:
            trace_type = trace if trace is not None else type
            overrides, style = _split_kwargs(kwargs)
            mapping = {**self.channels, **overrides} if inherit else overrides
            mapping = {k: v for k, v in mapping.items() if v is not None}
            dataset = as_dataset(data) if data is not None else self.dataset
            new_trace = make_trace(
                trace_type, dataset, {**dict(options or {}), **style}, **mapping
            )
        logger.debug("Adding %r as trace %d", new_trace, len(self.traces))
        return self._replace(traces=self.traces + (new_trace,))

    def add_markers(self, **kwargs: Any) -> "ChartSpec":
        return self.add_trace("scatter", mode="markers", **kwargs)

    def add_lines(self, **kwargs: Any) -> "ChartSpec":
        return self.add_trace("line", **kwargs)

    def add_bars(self, **kwargs: Any) -> "ChartSpec":
        return self.add_trace("bar", **kwargs)

    def add_histogram(self, **kwargs: Any) -> "ChartSpec":
        return self.add_trace("histogram", **kwargs)

    def add_heatmap(self, **kwargs: Any) -> "ChartSpec":
        return self.add_trace("heatmap", **kwargs)

    def add_surface(self, **kwargs: Any) -> "ChartSpec":
        return self.add_trace("surface", **kwargs)

    def update_layout(
        self, options: Mapping[str, Any] | None = None, **kwargs: Any
    ) -> "ChartSpec":
        """Shallow-merge layout options; later calls override earlier ones key by key."""
        return self._replace(layout=self.layout.merge(options, **kwargs))

    def __add__(self, other: Any) -> "ChartSpec":
        if isinstance(other, Trace):
            return self.add_trace(other)
        if isinstance(other, ChartSpec):
            return self._replace(
                traces=self.traces + other.traces,
                layout=self.layout.merge(other.layout),
            )
        if isinstance(other, Mapping):
            return self.update_layout(other)
        if isinstance(other, (list, tuple)):
            spec = self
            for item in other:
                spec = spec + item
            return spec
        raise TypeError(
            f"Unsupported operand type(s) for +: 'ChartSpec' and '{type(other).__name__}'"
        )

    def __radd__(self, other: Any) -> "ChartSpec":
        if isinstance(other, Trace):
            return self._replace(traces=(other,) + self.traces)
        if isinstance(other, Mapping):
            return self._replace(layout=Layout(other).merge(self.layout))
        if isinstance(other, (list, tuple)):
            return new(*other) + self
        raise TypeError(
            f"Unsupported operand type(s) for +: '{type(other).__name__}' and 'ChartSpec'"
        )

    def to_figure(self) -> dict[str, Any]:
        return build_figure(self)

    def __repr__(self) -> str:
        types = [t.type for t in self.traces]
        return f"<ChartSpec traces={types} layout={list(self.layout)}>"


def chart(
    data: Any = None,
    type: str | None = None,
    options: Mapping[str, Any] | None = None,
    **kwargs: Any,
) -> ChartSpec:
    """
    Start a chart.

    The channel mapping given here is kept as the chart's top-level mapping and
    inherited by traces added later. When the mapping is complete enough for a
    trace, or a type is given, the chart starts with one default trace: a
    heatmap when a channel (or the dataset itself) is a matrix, otherwise a
    scatter.

    Args:
        data: The dataset: dict of columns, records, DataFrame or 2-D matrix.
        type: Trace type for the default trace.
        options: Style options for the default trace.
        **kwargs: Channels (x, y, z, color, symbol, size, text) and style options.

    Returns:
        A ChartSpec with zero or one trace.
    """
    dataset = as_dataset(data)
    channels, style = _split_kwargs(kwargs)
    channels = {k: v for k, v in channels.items() if v is not None}
    spec = ChartSpec(dataset, channels)

    if type is None:
        inferred = default_trace_type(channels, dataset)
        supplied = set(channels)
        if inferred in MATRIX_TYPES and dataset is not None and dataset.is_matrix:
            supplied.add("z")
        if not set(REQUIRED_CHANNELS[inferred]) <= supplied:
            return spec
        type = inferred
    return spec.add_trace(type=type, options={**dict(options or {}), **style})


def new(*specs: SpecInput, **kwargs: Any) -> ChartSpec:
    """Create a ChartSpec by adding up traces, ChartSpecs and layout dicts."""
    spec = ChartSpec()
    for s in specs:
        spec = spec + s
    if kwargs:
        spec = spec.update_layout(kwargs)
    return spec
