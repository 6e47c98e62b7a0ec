# %%
# ruff: noqa: F401
from typing import Any

from figstudio.channels import CHANNELS, Col, col
from figstudio.chart_spec import ChartSpec, chart, new
from figstudio.colors import (
    CategoricalColorMapping,
    ContinuousColorMapping,
    SizeMapping,
    SymbolMapping,
    resolve_color,
)
from figstudio.dataset import Dataset
from figstudio.display import Column, Row
from figstudio.errors import (
    AuthenticationError,
    ConfigurationError,
    FigstudioError,
    NetworkError,
    PublishError,
)
from figstudio.layout import Layout
from figstudio.palettes import palette, palette_class, palette_names
from figstudio.publish import HostedFigure, fetch_figure, publish
from figstudio.trace import TRACE_TYPES, Trace, make_trace
from figstudio.util import configure

# This module is the entry point for building plotly.js charts declaratively.
#
# Key features:
# - Start a chart from a dataset and a channel mapping with `chart`
# - Add traces (layers) that inherit the chart's channel mapping
# - Compose with +: traces append, dicts merge layout options, charts combine
# - Lay charts out as subplots with & (side by side) and | (stacked)
# - Render as HTML or a notebook widget, save to files, or publish to a hosting service
#
# See https://plotly.com/javascript/reference/ for the figure format.

trace = make_trace

# The following convenience dicts can be added directly to a ChartSpec.
# Layout merges are shallow: a later `xaxis` dict replaces an earlier one.


def title(text):
    return {"title": {"text": text}}


def width(width):
    return {"width": width}


def height(height):
    return {"height": height}


def size(size, height=None):
    return {"width": size, "height": height or size}


def hide_legend():
    return {"showlegend": False}


def legend(**options):
    """Legend options, eg. legend(orientation="h", x=0, y=-0.2)."""
    return {"showlegend": True, "legend": options}


def xaxis(**options):
    return {"xaxis": options}


def yaxis(**options):
    return {"yaxis": options}


def axis_titles(x=None, y=None):
    out = {}
    if x is not None:
        out["xaxis"] = {"title": {"text": x}}
    if y is not None:
        out["yaxis"] = {"title": {"text": y}}
    return out


def barmode(mode):
    return {"barmode": mode}


def annotations(*notes: dict[str, Any]):
    """
    A list of annotations; each is a dict of plotly annotation attributes
    (see `annotation`). Replaces any annotations set earlier.
    """
    return {"annotations": list(notes)}


def annotation(text, x=None, y=None, showarrow=False, **kwargs):
    """
    A single annotation. Without x/y the note is placed relative to the plot
    area (paper coordinates) in the top-left corner.
    """
    note = {"text": text, "showarrow": showarrow, **kwargs}
    if x is None and y is None:
        note.update({"xref": "paper", "yref": "paper", "x": 0, "y": 1})
    else:
        note.update({"x": x, "y": y})
    return note


def margin(*args):
    """
    Set margin values for a chart using CSS-style margin shorthand.

    Supported arities:
        margin(all)
        margin(vertical, horizontal)
        margin(top, horizontal, bottom)
        margin(top, right, bottom, left)

    """
    if len(args) == 1:
        return {"margin": {"t": args[0], "r": args[0], "b": args[0], "l": args[0]}}
    elif len(args) == 2:
        return {"margin": {"t": args[0], "b": args[0], "l": args[1], "r": args[1]}}
    elif len(args) == 3:
        return {"margin": {"t": args[0], "l": args[1], "r": args[1], "b": args[2]}}
    elif len(args) == 4:
        return {"margin": {"t": args[0], "r": args[1], "b": args[2], "l": args[3]}}
    else:
        raise ValueError(f"Invalid number of arguments: {len(args)}")


# %%
