# %%
from typing import Literal, Sequence, Union

import numpy as np

from figstudio.errors import ConfigurationError

PaletteClass = Literal["qualitative", "sequential", "diverging"]
PaletteInput = Union[str, Sequence[str]]

# ColorBrewer (https://colorbrewer2.org) and matplotlib's viridis.
QUALITATIVE: dict[str, list[str]] = {
    "Set1": ["#E41A1C", "#377EB8", "#4DAF4A", "#984EA3", "#FF7F00", "#FFFF33", "#A65628", "#F781BF", "#999999"],
    "Set2": ["#66C2A5", "#FC8D62", "#8DA0CB", "#E78AC3", "#A6D854", "#FFD92F", "#E5C494", "#B3B3B3"],
    "Set3": ["#8DD3C7", "#FFFFB3", "#BEBADA", "#FB8072", "#80B1D3", "#FDB462", "#B3DE69", "#FCCDE5", "#D9D9D9", "#BC80BD", "#CCEBC5", "#FFED6F"],
    "Dark2": ["#1B9E77", "#D95F02", "#7570B3", "#E7298A", "#66A61E", "#E6AB02", "#A6761D", "#666666"],
    "Paired": ["#A6CEE3", "#1F78B4", "#B2DF8A", "#33A02C", "#FB9A99", "#E31A1C", "#FDBF6F", "#FF7F00", "#CAB2D6", "#6A3D9A", "#FFFF99", "#B15928"],
    "Pastel1": ["#FBB4AE", "#B3CDE3", "#CCEBC5", "#DECBE4", "#FED9A6", "#FFFFCC", "#E5D8BD", "#FDDAEC", "#F2F2F2"],
    "Accent": ["#7FC97F", "#BEAED4", "#FDC086", "#FFFF99", "#386CB0", "#F0027F", "#BF5B17", "#666666"],
}

SEQUENTIAL: dict[str, list[str]] = {
    "Blues": ["#F7FBFF", "#DEEBF7", "#C6DBEF", "#9ECAE1", "#6BAED6", "#4292C6", "#2171B5", "#08519C", "#08306B"],
    "Greens": ["#F7FCF5", "#E5F5E0", "#C7E9C0", "#A1D99B", "#74C476", "#41AB5D", "#238B45", "#006D2C", "#00441B"],
    "Reds": ["#FFF5F0", "#FEE0D2", "#FCBBA1", "#FC9272", "#FB6A4A", "#EF3B2C", "#CB181D", "#A50F15", "#67000D"],
    "YlOrRd": ["#FFFFCC", "#FFEDA0", "#FED976", "#FEB24C", "#FD8D3C", "#FC4E2A", "#E31A1C", "#BD0026", "#800026"],
    "Viridis": ["#440154", "#482878", "#3E4989", "#31688E", "#26828E", "#1F9E89", "#35B779", "#6DCD59", "#B4DE2C", "#FDE725"],
}

DIVERGING: dict[str, list[str]] = {
    "RdBu": ["#67001F", "#B2182B", "#D6604D", "#F4A582", "#FDDBC7", "#F7F7F7", "#D1E5F0", "#92C5DE", "#4393C3", "#2166AC", "#053061"],
    "PuOr": ["#7F3B08", "#B35806", "#E08214", "#FDB863", "#FEE0B6", "#F7F7F7", "#D8DAEB", "#B2ABD2", "#8073AC", "#542788", "#2D004B"],
    "BrBG": ["#543005", "#8C510A", "#BF812D", "#DFC27D", "#F6E8C3", "#F5F5F5", "#C7EAE5", "#80CDC1", "#35978F", "#01665E", "#003C30"],
    "Spectral": ["#9E0142", "#D53E4F", "#F46D43", "#FDAE61", "#FEE08B", "#FFFFBF", "#E6F598", "#ABDDA4", "#66C2A5", "#3288BD", "#5E4FA2"],
}

_CLASSES: dict[str, PaletteClass] = {
    **{name: "qualitative" for name in QUALITATIVE},
    **{name: "sequential" for name in SEQUENTIAL},
    **{name: "diverging" for name in DIVERGING},
}


def palette_names() -> list[str]:
    return list(_CLASSES)


def palette_class(name: str) -> PaletteClass:
    if name not in _CLASSES:
        raise ConfigurationError(
            f"Unknown palette '{name}'", context={"known": palette_names()}
        )
    return _CLASSES[name]


def palette(p: PaletteInput) -> list[str]:
    """
    Return the colors of a named palette, or validate and normalize a list of hex colors.
    """
    if isinstance(p, str):
        palette_class(p)
        return list({**QUALITATIVE, **SEQUENTIAL, **DIVERGING}[p])
    colors = [rgb_to_hex(hex_to_rgb(c)) for c in p]
    if not colors:
        raise ConfigurationError("A palette needs at least one color")
    return colors


# %% Color math


def hex_to_rgb(color: str) -> tuple[int, int, int]:
    c = color.lstrip("#")
    if len(c) == 3:
        c = "".join(ch * 2 for ch in c)
    if len(c) != 6:
        raise ConfigurationError(f"Invalid hex color '{color}'")
    try:
        return (int(c[0:2], 16), int(c[2:4], 16), int(c[4:6], 16))
    except ValueError:
        raise ConfigurationError(f"Invalid hex color '{color}'") from None


def rgb_to_hex(rgb: Sequence[float]) -> str:
    r, g, b = (int(round(min(max(v, 0), 255))) for v in rgb)
    return f"#{r:02X}{g:02X}{b:02X}"


def rgb_to_lab(rgb: Sequence[float]) -> np.ndarray:
    """Convert an sRGB triple (0-255) to CIE L*a*b* under the D65 white point."""
    c = np.asarray(rgb, dtype=float) / 255.0
    linear = np.where(c <= 0.04045, c / 12.92, ((c + 0.055) / 1.055) ** 2.4)
    m = np.array(
        [
            [0.4124564, 0.3575761, 0.1804375],
            [0.2126729, 0.7151522, 0.0721750],
            [0.0193339, 0.1191920, 0.9503041],
        ]
    )
    xyz = m @ linear / np.array([0.95047, 1.0, 1.08883])
    eps, kappa = 216 / 24389, 24389 / 27
    f = np.where(xyz > eps, np.cbrt(xyz), (kappa * xyz + 16) / 116)
    return np.array([116 * f[1] - 16, 500 * (f[0] - f[1]), 200 * (f[1] - f[2])])


def color_distance(c1: str, c2: str) -> float:
    """Perceptual distance between two hex colors (CIE76 delta E)."""
    return float(np.linalg.norm(rgb_to_lab(hex_to_rgb(c1)) - rgb_to_lab(hex_to_rgb(c2))))


def interpolate(colors: Sequence[str], t: float) -> str:
    """
    Linear interpolation along a list of colors, treated as evenly spaced stops on [0, 1].
    """
    if len(colors) == 1:
        return rgb_to_hex(hex_to_rgb(colors[0]))
    t = min(max(float(t), 0.0), 1.0)
    scaled = t * (len(colors) - 1)
    i = min(int(np.floor(scaled)), len(colors) - 2)
    frac = scaled - i
    a = np.array(hex_to_rgb(colors[i]), dtype=float)
    b = np.array(hex_to_rgb(colors[i + 1]), dtype=float)
    return rgb_to_hex(a + (b - a) * frac)


def sample(colors: Sequence[str], n: int) -> list[str]:
    """n evenly spaced colors along the palette, endpoints included."""
    if n == 1:
        return [interpolate(colors, 0.5)]
    return [interpolate(colors, i / (n - 1)) for i in range(n)]


# %%
