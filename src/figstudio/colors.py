"""
Resolution of color, symbol and size channels into concrete visual encodings.

Categorical data maps onto palette entries one level at a time. Continuous
data maps onto a color ramp by linear interpolation across the observed range.
"""

import math
import warnings
from itertools import combinations
from typing import Any, Sequence

import numpy as np

from figstudio import palettes
from figstudio.channels import ResolvedChannel
from figstudio.errors import ConfigurationError
from figstudio.util import CONFIG

# Above this many candidate subsets, pick distinct colors greedily.
COMBINATION_LIMIT = 20_000

SYMBOLS = (
    "circle",
    "square",
    "diamond",
    "cross",
    "x",
    "triangle-up",
    "triangle-down",
    "pentagon",
    "hexagon",
    "star",
)


def _is_missing(v: Any) -> bool:
    return v is None or (isinstance(v, float) and math.isnan(v))


def category_levels(values: Any, levels: Sequence[Any] | None = None) -> tuple:
    """
    The ordered distinct values of a categorical vector.

    Explicit `levels` win; otherwise distinct values are sorted, so the result
    does not depend on the order of the input.
    """
    if levels is not None:
        return tuple(levels)
    present = {v for v in np.asarray(values).tolist() if not _is_missing(v)}
    try:
        return tuple(sorted(present))
    except TypeError:
        return tuple(sorted(present, key=lambda v: (type(v).__name__, str(v))))


def distinct_subset(colors: Sequence[str], k: int) -> list[int]:
    """
    Indices of the k palette entries that are most perceptually distinct.

    Maximizes the minimum pairwise distance, then the total pairwise distance;
    remaining ties go to the earliest combination in palette order.
    """
    n = len(colors)
    if k >= n:
        return list(range(n))
    labs = np.array([palettes.rgb_to_lab(palettes.hex_to_rgb(c)) for c in colors])
    dist = np.linalg.norm(labs[:, None, :] - labs[None, :, :], axis=-1)

    if math.comb(n, k) <= COMBINATION_LIMIT:
        best: tuple[int, ...] = tuple(range(k))
        best_key = None
        for combo in combinations(range(n), k):
            pairs = [dist[i, j] for i, j in combinations(combo, 2)]
            key = (min(pairs), sum(pairs)) if pairs else (0.0, 0.0)
            if best_key is None or key > best_key:
                best, best_key = combo, key
        return list(best)

    # greedy farthest-point selection
    i, j = np.unravel_index(np.argmax(dist), dist.shape)
    chosen = [int(min(i, j)), int(max(i, j))]
    while len(chosen) < k:
        candidates = [c for c in range(n) if c not in chosen]
        scores = [min(dist[c, s] for s in chosen) for c in candidates]
        chosen.append(candidates[int(np.argmax(scores))])
    return sorted(chosen)


class CategoricalColorMapping:
    """
    A bijection from the levels of a categorical channel to colors.

    Args:
        values: The data values.
        palette: Palette name or list of hex colors.
        levels: Explicit level order.
        ordered: Sample the palette evenly instead of picking distinct entries.
    """

    def __init__(
        self,
        values: Any,
        palette: palettes.PaletteInput | None = None,
        levels: Sequence[Any] | None = None,
        ordered: bool = False,
    ):
        default = CONFIG["sequential_palette"] if ordered else CONFIG["qualitative_palette"]
        self.palette = palette if palette is not None else default
        self.levels = category_levels(values, levels)
        available = palettes.palette(self.palette)
        n = len(self.levels)

        ramp = isinstance(self.palette, str) and palettes.palette_class(self.palette) != "qualitative"
        if n == 0:
            colors: list[str] = []
        elif ramp:
            colors = palettes.sample(available, n)
        elif n > len(available):
            warnings.warn(
                f"{n} levels exceed the {len(available)} colors of palette "
                f"{self.palette!r}; interpolating between palette colors",
                UserWarning,
                stacklevel=2,
            )
            colors = palettes.sample(available, n)
        else:
            colors = [available[i] for i in distinct_subset(available, n)]
        if len(set(colors)) < n:
            raise ConfigurationError(
                f"Palette {self.palette!r} cannot give {n} distinct colors",
                context={"levels": n, "distinct": len(set(colors))},
            )
        self.colors = tuple(colors)
        self._lookup = dict(zip(self.levels, self.colors))

    def color_for(self, value: Any) -> str:
        if _is_missing(value):
            return CONFIG["na_color"]
        return self._lookup.get(value, CONFIG["na_color"])

    def colors_for(self, values: Any) -> list[str]:
        return [self.color_for(v) for v in np.asarray(values).tolist()]

    def as_dict(self) -> dict:
        return dict(self._lookup)

    def __repr__(self) -> str:
        return f"<CategoricalColorMapping {self.as_dict()}>"


def as_float(values: Any) -> np.ndarray:
    arr = np.asarray(values)
    if arr.dtype.kind == "O":
        arr = np.array([np.nan if v is None else v for v in arr.ravel().tolist()]).reshape(
            arr.shape
        )
    return arr.astype(float)


class ContinuousColorMapping:
    """
    Maps numbers onto a color ramp by linear interpolation over the observed range.

    Diverging ramps pivot at `midpoint`: zero when the range spans zero, the
    center of the range otherwise.
    """

    def __init__(
        self,
        values: Any,
        palette: palettes.PaletteInput | None = None,
        diverging: bool | None = None,
        midpoint: float | None = None,
    ):
        self.palette = palette if palette is not None else CONFIG["sequential_palette"]
        self.stops = palettes.palette(self.palette)
        if diverging is None:
            diverging = (
                isinstance(self.palette, str)
                and palettes.palette_class(self.palette) == "diverging"
            )
        self.diverging = diverging

        finite = as_float(values)
        finite = finite[np.isfinite(finite)]
        if finite.size:
            self.domain = (float(finite.min()), float(finite.max()))
        else:
            self.domain = (0.0, 1.0)
        lo, hi = self.domain

        if not diverging:
            self.midpoint = None
        elif midpoint is not None:
            self.midpoint = float(midpoint)
        else:
            self.midpoint = 0.0 if lo < 0 < hi else (lo + hi) / 2

    def position(self, value: Any) -> float:
        """Position of `value` on the ramp in [0, 1]; NaN for missing values."""
        if _is_missing(value):
            return math.nan
        v = float(value)
        if math.isnan(v):
            return math.nan
        lo, hi = self.domain
        if hi == lo:
            return 0.5
        v = min(max(v, lo), hi)
        m = self.midpoint
        if m is None or not (lo < m < hi):
            return (v - lo) / (hi - lo)
        if v <= m:
            return 0.5 * (v - lo) / (m - lo)
        return 0.5 + 0.5 * (v - m) / (hi - m)

    def color_for(self, value: Any) -> str:
        t = self.position(value)
        if math.isnan(t):
            return CONFIG["na_color"]
        return palettes.interpolate(self.stops, t)

    def colors_for(self, values: Any) -> list[str]:
        return [self.color_for(v) for v in as_float(values).tolist()]

    def colorscale(self) -> list[list]:
        """
        The ramp as a plotly colorscale over the data domain.

        Stops are evenly spaced, except on a diverging ramp, where the center
        stop sits at the midpoint's position within the domain.
        """
        if len(self.stops) == 1:
            return [[0.0, self.stops[0]], [1.0, self.stops[0]]]
        n = len(self.stops) - 1
        lo, hi = self.domain
        m = self.midpoint
        if m is None or not (lo < m < hi):
            return [[i / n, c] for i, c in enumerate(self.stops)]
        p = (m - lo) / (hi - lo)
        scale = []
        for i, c in enumerate(self.stops):
            t = i / n
            x = p * t / 0.5 if t <= 0.5 else p + (1 - p) * (t - 0.5) / 0.5
            scale.append([round(x, 6), c])
        return scale

    def __repr__(self) -> str:
        return f"<ContinuousColorMapping domain={self.domain} palette={self.palette!r}>"


def resolve_color(
    channel: ResolvedChannel | None,
    palette: palettes.PaletteInput | None = None,
) -> CategoricalColorMapping | ContinuousColorMapping | None:
    """
    Pick a color mapping for a bound channel from its semantic kind.

    Returns None for literal (or absent) channels, which are used as-is.
    """
    if channel is None or not channel.is_data:
        return None
    if channel.scale == "continuous":
        return ContinuousColorMapping(channel.values, palette)
    if channel.scale == "ordinal":
        return CategoricalColorMapping(channel.values, palette, channel.levels, ordered=True)
    if channel.scale == "categorical":
        return CategoricalColorMapping(channel.values, palette, channel.levels)
    raise ConfigurationError(f"Cannot map channel '{channel.name}' to colors")


class SymbolMapping:
    """Assigns marker symbols to the levels of a channel, in level order."""

    def __init__(self, values: Any, symbols: Sequence[str] | None = None, levels: Sequence[Any] | None = None):
        self.symbols = tuple(symbols) if symbols is not None else SYMBOLS
        if not self.symbols:
            raise ConfigurationError("At least one symbol is required")
        self.levels = category_levels(values, levels)
        if len(self.levels) > len(self.symbols):
            warnings.warn(
                f"{len(self.levels)} levels exceed the {len(self.symbols)} available symbols; "
                "symbols will repeat",
                UserWarning,
                stacklevel=2,
            )
        self._lookup = {
            level: self.symbols[i % len(self.symbols)] for i, level in enumerate(self.levels)
        }

    def symbol_for(self, value: Any) -> str | None:
        return self._lookup.get(value)

    def as_dict(self) -> dict:
        return dict(self._lookup)


class SizeMapping:
    """Linear map from a numeric range to marker sizes in pixels."""

    def __init__(self, values: Any, sizes: Sequence[float] | None = None):
        lo_px, hi_px = sizes if sizes is not None else CONFIG["sizes"]
        self.sizes = (float(lo_px), float(hi_px))
        finite = as_float(values)
        finite = finite[np.isfinite(finite)]
        self.domain = (float(finite.min()), float(finite.max())) if finite.size else (0.0, 1.0)

    def size_for(self, value: Any) -> float:
        lo, hi = self.domain
        lo_px, hi_px = self.sizes
        if _is_missing(value) or math.isnan(float(value)):
            return lo_px
        if hi == lo:
            return (lo_px + hi_px) / 2
        return lo_px + (float(value) - lo) / (hi - lo) * (hi_px - lo_px)

    def sizes_for(self, values: Any) -> list[float]:
        return [self.size_for(v) for v in as_float(values).tolist()]
