import copy
import re
from collections.abc import Mapping
from typing import Any, Iterator

from figstudio.errors import ConfigurationError

LAYOUT_OPTIONS = frozenset(
    {
        "title",
        "showlegend",
        "legend",
        "annotations",
        "xaxis",
        "yaxis",
        "scene",
        "width",
        "height",
        "margin",
        "hovermode",
        "barmode",
        "boxmode",
        "font",
        "paper_bgcolor",
        "plot_bgcolor",
        "colorway",
        "shapes",
        "autosize",
        "template",
        "dragmode",
        "coloraxis",
    }
)
_NUMBERED_OPTION = re.compile(r"^(xaxis|yaxis|scene)\d+$")


def is_layout_option(name: str) -> bool:
    return name in LAYOUT_OPTIONS or bool(_NUMBERED_OPTION.match(name))


class Layout(Mapping):
    """
    Presentation options of a chart (legend, annotations, axes, size...).

    Layouts are immutable; `merge` returns a new Layout where later values win.
    """

    def __init__(self, options: Mapping[str, Any] | None = None) -> None:
        options = dict(options or {})
        unknown = sorted(k for k in options if not is_layout_option(k))
        if unknown:
            raise ConfigurationError(
                f"Unknown layout option(s): {', '.join(unknown)}",
                context={"unknown": unknown},
            )
        self._options = copy.deepcopy(options)

    def merge(self, options: Mapping[str, Any] | None = None, **kwargs: Any) -> "Layout":
        return Layout({**self._options, **dict(options or {}), **kwargs})

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._options)

    def __getitem__(self, key: str) -> Any:
        return self._options[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._options)

    def __len__(self) -> int:
        return len(self._options)

    def __repr__(self) -> str:
        return f"Layout({self._options!r})"
