# %%
"""
Conversion of ChartSpecs (and Row/Column compositions of them) into the
plotly.js figure format: {"data": [...traces], "layout": {...}}.

Dataset references never appear in the output; every column is inlined as a
literal array.
"""

import logging
from typing import Any

import numpy as np

from figstudio.channels import ResolvedChannel
from figstudio.colors import (
    CategoricalColorMapping,
    ContinuousColorMapping,
    SizeMapping,
    SymbolMapping,
    as_float,
    resolve_color,
)
from figstudio.display import Column, Row
from figstudio.layout import Layout
from figstudio.trace import MATRIX_TYPES, THREE_D_TYPES, Trace
from figstudio.util import CONFIG, deep_merge

logger = logging.getLogger(__name__)

PLOTLY_TYPES = {
    "scatter": "scatter",
    "line": "scatter",
    "bar": "bar",
    "histogram": "histogram",
    "box": "box",
    "heatmap": "heatmap",
    "contour": "contour",
    "surface": "surface",
    "scatter3d": "scatter3d",
}

DEFAULT_MODES = {"scatter": "markers", "line": "lines", "scatter3d": "markers"}

# layout keys whose values accumulate across subplots
ACCUMULATED_KEYS = ("annotations", "shapes")


class _Missing:
    def __repr__(self) -> str:
        return "NA"


MISSING = _Missing()


def _values(channel: ResolvedChannel, mask: np.ndarray | None = None) -> Any:
    if channel.kind == "literal":
        return channel.values
    values = np.asarray(channel.values)
    if mask is not None:
        values = values[mask]
    return values.tolist()


def _group_keys(values: Any, levels: tuple) -> list:
    level_set = set(levels)
    return [v if v in level_set else MISSING for v in np.asarray(values).tolist()]


def _matrix_trace(trace: Trace, base: dict, palette: Any) -> dict:
    z = trace.channels["z"]
    d = dict(base)
    for name in ("x", "y", "text"):
        if name in trace.channels:
            d[name] = _values(trace.channels[name])
    d["z"] = np.asarray(z.values).tolist()
    cmap = ContinuousColorMapping(z.values, palette)
    d["colorscale"] = cmap.colorscale()
    if z.label:
        d["colorbar"] = {"title": {"text": z.label}}
    return d


def trace_to_dicts(trace: Trace) -> list[dict[str, Any]]:
    """
    Convert one Trace into plotly trace dicts.

    Categorical color and symbol channels split the trace into one plotly
    trace per level (in level order, missing values last, empty groups
    dropped) so that each level gets a legend entry. Continuous color stays a
    single trace with a colorscale.
    """
    options = dict(trace.options)
    palette = options.pop("colors", None)
    symbols = options.pop("symbols", None)
    sizes = options.pop("sizes", None)

    base: dict[str, Any] = {"type": PLOTLY_TYPES[trace.type]}
    if trace.type in DEFAULT_MODES:
        base["mode"] = options.pop("mode", DEFAULT_MODES[trace.type])

    if trace.type in MATRIX_TYPES:
        return [deep_merge(_matrix_trace(trace, base, palette), options)]

    channels = trace.channels
    color = channels.get("color")
    symbol = channels.get("symbol")
    size = channels.get("size")
    color_key = "line" if trace.type == "line" else "marker"

    color_map = resolve_color(color, palette)
    symbol_map = (
        SymbolMapping(symbol.values, symbols, symbol.levels)
        if symbol is not None and symbol.is_data
        else None
    )
    size_map = SizeMapping(size.values, sizes) if size is not None and size.is_data else None

    style: dict[str, Any] = {}
    if color is not None and not color.is_data:
        style[color_key] = {"color": color.values}
    if symbol is not None and not symbol.is_data:
        style.setdefault("marker", {})["symbol"] = symbol.values
    if size is not None and not size.is_data:
        style.setdefault("marker", {})["size"] = size.values

    def build(mask: np.ndarray | None) -> dict[str, Any]:
        d = deep_merge(base, style)
        for name in ("x", "y", "z", "text"):
            if name in channels:
                d[name] = _values(channels[name], mask)
        if size_map is not None:
            d.setdefault("marker", {})["size"] = size_map.sizes_for(
                _values(size, mask)
            )
        if isinstance(color_map, ContinuousColorMapping):
            marker = d.setdefault("marker", {})
            marker["color"] = as_float(_values(color, mask)).tolist()
            marker["colorscale"] = color_map.colorscale()
            marker["cmin"], marker["cmax"] = color_map.domain
            marker["showscale"] = True
            if color.label:
                marker["colorbar"] = {"title": {"text": color.label}}
        return d

    split_color = isinstance(color_map, CategoricalColorMapping)
    if not split_color and symbol_map is None:
        return [deep_merge(build(None), options)]

    nrows = len(next(ch.values for ch in channels.values() if ch.kind == "vector"))
    color_keys = _group_keys(color.values, color_map.levels) if split_color else [None] * nrows
    symbol_keys = _group_keys(symbol.values, symbol_map.levels) if symbol_map else [None] * nrows

    def ordered(levels: tuple, keys: list) -> list:
        return list(levels) + ([MISSING] if MISSING in keys else [])

    color_levels = ordered(color_map.levels, color_keys) if split_color else [None]
    symbol_levels = ordered(symbol_map.levels, symbol_keys) if symbol_map else [None]

    user_name = options.pop("name", None)
    out = []
    for cl in color_levels:
        for sl in symbol_levels:
            mask = np.array(
                [
                    (cl is None or ck is cl or ck == cl) and (sl is None or sk is sl or sk == sl)
                    for ck, sk in zip(color_keys, symbol_keys)
                ],
                dtype=bool,
            )
            if not mask.any():
                continue
            d = build(mask)
            name = ", ".join(str(level) for level in (cl, sl) if level is not None)
            if user_name:
                name = f"{user_name}: {name}"
            d["name"] = name
            d["legendgroup"] = name
            if cl is not None:
                c = CONFIG["na_color"] if cl is MISSING else color_map.color_for(cl)
                d.setdefault(color_key, {})["color"] = c
            if sl is not None and sl is not MISSING:
                d.setdefault("marker", {})["symbol"] = symbol_map.symbol_for(sl)
            out.append(deep_merge(d, options))
    return out


def _axis_title(label: str | None) -> dict:
    return {"title": {"text": label}} if label else {}


def default_layout(traces: tuple[Trace, ...]) -> dict[str, Any]:
    """Axis titles from the first trace's column labels."""
    if not traces:
        return {}
    first = traces[0]
    labels = {
        name: ch.label for name, ch in first.channels.items() if name in ("x", "y", "z")
    }
    if first.type in THREE_D_TYPES:
        scene = {
            f"{name}axis": _axis_title(label) for name, label in labels.items() if label
        }
        return {"scene": scene} if scene else {}
    layout = {
        f"{name}axis": _axis_title(labels.get(name)) for name in ("x", "y") if labels.get(name)
    }
    return layout


def build_figure(spec: Any) -> dict[str, Any]:
    """The plotly.js figure dict for a single ChartSpec."""
    data = [d for trace in spec.traces for d in trace_to_dicts(trace)]
    layout = deep_merge(default_layout(spec.traces), spec.layout.to_dict())
    logger.debug("Built figure with %d plotly traces", len(data))
    return {"data": data, "layout": layout}


# %% Subplot composition


def _split(domain: tuple[float, float], n: int, gap: float) -> list[tuple[float, float]]:
    lo, hi = domain
    width = hi - lo
    gap = min(gap, width / (2 * n)) if n > 1 else 0.0
    cell = (width - gap * (n - 1)) / n
    return [
        (round(lo + i * (cell + gap), 6), round(lo + i * (cell + gap) + cell, 6))
        for i in range(n)
    ]


def _place(item: Any, xdom: tuple, ydom: tuple, leaves: list, options: dict) -> None:
    if isinstance(item, Row):
        options.update(item.options)
        for child, cell in zip(item.items, _split(xdom, len(item.items), item.gap)):
            _place(child, cell, ydom, leaves, options)
    elif isinstance(item, Column):
        options.update(item.options)
        # first child on top
        cells = reversed(_split(ydom, len(item.items), item.gap))
        for child, cell in zip(item.items, cells):
            _place(child, xdom, cell, leaves, options)
    elif hasattr(item, "traces") and hasattr(item, "layout"):
        leaves.append((item, xdom, ydom))
    else:
        raise TypeError(f"Cannot place object of type {type(item).__name__} in a subplot")


def compose_figure(item: Any) -> dict[str, Any]:
    """
    Lay out nested Rows and Columns of ChartSpecs as subplots of one figure.

    Each chart gets its own axis pair (xaxisN/yaxisN) or 3-D scene (sceneN)
    with a domain computed from its position in the grid.
    """
    leaves: list = []
    options: dict = {}
    _place(item, (0.0, 1.0), (0.0, 1.0), leaves, options)

    data: list[dict] = []
    layout: dict[str, Any] = {}
    for k, (spec, xdom, ydom) in enumerate(leaves, start=1):
        suffix = "" if k == 1 else str(k)
        fig = build_figure(spec)
        sub_layout = fig["layout"]
        xaxis = sub_layout.pop("xaxis", {})
        yaxis = sub_layout.pop("yaxis", {})
        scene = sub_layout.pop("scene", {})

        has_2d = has_3d = False
        for d in fig["data"]:
            if d["type"] in THREE_D_TYPES:
                d["scene"] = f"scene{suffix}"
                has_3d = True
            else:
                d["xaxis"] = f"x{suffix}"
                d["yaxis"] = f"y{suffix}"
                has_2d = True
            data.append(d)

        if has_2d or not has_3d:
            layout[f"xaxis{suffix}"] = deep_merge(
                xaxis, {"domain": list(xdom), "anchor": f"y{suffix}"}
            )
            layout[f"yaxis{suffix}"] = deep_merge(
                yaxis, {"domain": list(ydom), "anchor": f"x{suffix}"}
            )
        if has_3d:
            layout[f"scene{suffix}"] = deep_merge(
                scene, {"domain": {"x": list(xdom), "y": list(ydom)}}
            )

        for key, value in sub_layout.items():
            if key in ACCUMULATED_KEYS:
                layout[key] = layout.get(key, []) + list(value)
            else:
                layout[key] = value

    layout = deep_merge(layout, Layout(options).to_dict())
    return {"data": data, "layout": layout}


# %%
