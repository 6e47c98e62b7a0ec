import json
import os
import uuid
from typing import Any, Sequence

from html2image import Html2Image
from PIL import Image

from figstudio.publish import HostedFigure, publish
from figstudio.util import CONFIG
from figstudio.widget import Widget, to_json


def create_parent_dir(path: str) -> None:
    """Create parent directory if it doesn't exist."""
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)


def html_snippet(figure: dict[str, Any], id=None) -> str:
    id = id or f"figstudio-figure-{uuid.uuid4().hex}"
    # keep "</script>" inside the JSON from closing the tag early
    data = json.dumps(to_json(figure)).replace("</", "<\\/")

    return f"""
    <div class="figstudio-figure" id="{id}"></div>
    <script src="{CONFIG['plotlyjs_url']}"></script>
    <script type="application/json" id="{id}-data">{data}</script>
    <script>
      (function () {{
        const container = document.getElementById('{id}');
        const figure = JSON.parse(document.getElementById('{id}-data').textContent);
        Plotly.newPlot(container, figure.data, figure.layout, {{responsive: true}});
      }})();
    </script>
    """


def html_standalone(figure: dict[str, Any], id=None) -> str:
    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="UTF-8">
        <title>figstudio</title>
    </head>
    <body>
        {html_snippet(figure, id)}
    </body>
    </html>
    """


class HTML:
    def __init__(self, figure):
        self.figure = figure
        self.id = f"figstudio-figure-{uuid.uuid4().hex}"

    def _repr_mimebundle_(self, **kwargs):
        return {"text/html": html_snippet(self.figure, self.id)}, {}


class FigureItem:
    """
    Base class for anything that renders to a single plotly.js figure:
    ChartSpecs and Row/Column compositions of them.

    Items display themselves in notebooks (as HTML or as a widget), save to
    HTML or image files, publish to a hosting service, and combine into
    subplots with `&` (side by side) and `|` (stacked).
    """

    def __init__(self):
        self._html: HTML | None = None
        self._widget: Widget | None = None
        self._display_as = None

    def display_as(self, display_as) -> "FigureItem":
        if display_as not in ["html", "widget"]:
            raise ValueError("display_as must be either 'html' or 'widget'")
        self._display_as = display_as
        return self

    def to_figure(self) -> dict[str, Any]:
        raise NotImplementedError("Subclasses must implement to_figure method")

    def for_json(self) -> dict[str, Any]:
        return self.to_figure()

    def __and__(self, other: Any) -> "Row":
        return Row(self, other)

    def __rand__(self, other: Any) -> "Row":
        return Row(other, self)

    def __or__(self, other: Any) -> "Column":
        return Column(self, other)

    def __ror__(self, other: Any) -> "Column":
        return Column(other, self)

    def _repr_mimebundle_(self, **kwargs: Any) -> Any:
        return self.repr()._repr_mimebundle_(**kwargs)

    def _repr_html_(self, **kwargs: Any) -> str | None:
        bundle = self.repr()._repr_mimebundle_(**kwargs)
        if (
            isinstance(bundle, tuple)
            and len(bundle) > 0
            and isinstance(bundle[0], dict)
        ):
            return bundle[0].get("text/html")
        return None

    def html(self) -> HTML:
        """
        Lazily generate & cache the HTML for this item.
        """
        if self._html is None:
            self._html = HTML(self.to_figure())
        return self._html

    def widget(self) -> Widget:
        """
        Lazily generate & cache the widget for this item.
        """
        if self._widget is None:
            self._widget = Widget(self.to_figure())
        return self._widget

    def repr(self) -> Widget | HTML:
        display_as = self._display_as or CONFIG["display_as"]
        if display_as == "widget":
            return self.widget()
        else:
            return self.html()

    def save_html(self, path: str) -> None:
        create_parent_dir(path)
        with open(path, "w") as f:
            f.write(html_standalone(self.to_figure()))
        print(f"HTML saved to {path}")

    def save_image(self, path, width=700, height=500):
        # Save image using headless browser
        create_parent_dir(path)

        hti = Html2Image()
        hti.size = (width, height)
        hti.output_path = os.path.dirname(os.path.abspath(path))

        hti.screenshot(
            html_str=html_standalone(self.to_figure()), save_as=os.path.basename(path)
        )

        # Crop transparent regions
        img = Image.open(path)
        img = img.crop(img.getbbox())
        img.save(path)

        print(f"Image saved to {path}")

    def reset(self, other: "FigureItem") -> None:
        """
        Render another item into this item's widget.
        """
        if self._html is not None:
            raise ValueError(
                "Cannot reset an HTML figure. Use display_as='widget' or foo.widget() to create a resettable widget."
            )
        self.widget().set_figure(other.to_figure())

    def publish(self, **kwargs: Any) -> HostedFigure:
        """Publish this item to the hosting service. See `figstudio.publish.publish`."""
        return publish(self, **kwargs)


def flatten_items(
    items: Sequence[Any], layout_class: type
) -> tuple[list[Any], dict[str, Any]]:
    flattened: list[Any] = []
    options: dict[str, Any] = {}
    for item in items:
        if isinstance(item, layout_class):
            flattened.extend(item.items)
            options.update(item.options)
        elif isinstance(item, dict):
            options.update(item)
        else:
            flattened.append(item)
    return flattened, options


class Row(FigureItem):
    "Render charts side by side as subplots."

    def __init__(self, *items: Any, gap: float = 0.05, **kwargs):
        super().__init__()
        self.items, options = flatten_items(items, Row)
        self.options = options | kwargs
        self.gap = gap

    def to_figure(self) -> dict[str, Any]:
        from figstudio.figure import compose_figure

        return compose_figure(self)


class Column(FigureItem):
    """Render charts stacked vertically as subplots."""

    def __init__(self, *items: Any, gap: float = 0.05, **kwargs):
        super().__init__()
        self.items, options = flatten_items(items, Column)
        self.options = options | kwargs
        self.gap = gap

    def to_figure(self) -> dict[str, Any]:
        from figstudio.figure import compose_figure

        return compose_figure(self)
