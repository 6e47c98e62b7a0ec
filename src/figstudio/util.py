# %%
import importlib.util
import os
import pathlib
from typing import Any

from figstudio.errors import ConfigurationError

PARENT_PATH = pathlib.Path(importlib.util.find_spec("figstudio.util").origin).parent

CONFIG: dict[str, Any] = {
    "display_as": "html",
    "domain": os.environ.get("FIGSTUDIO_DOMAIN", "https://api.plot.ly"),
    "username": os.environ.get("FIGSTUDIO_USERNAME"),
    "api_key": os.environ.get("FIGSTUDIO_API_KEY"),
    "timeout": 30,
    "plotlyjs_url": "https://cdn.plot.ly/plotly-2.35.2.min.js",
    "na_color": "#808080",
    "sizes": (6, 30),
    "qualitative_palette": "Set2",
    "sequential_palette": "Viridis",
}


def configure(options: dict[str, Any] = {}, **kwargs: Any) -> None:
    """
    Update the global configuration.

    Args:
        options: A dict of configuration values.
        **kwargs: Configuration values as keyword arguments; these win over `options`.
    """
    updates = {**options, **kwargs}
    unknown = sorted(set(updates) - set(CONFIG))
    if unknown:
        raise ConfigurationError(
            f"Unknown configuration option(s): {', '.join(unknown)}",
            context={"known": sorted(CONFIG)},
        )
    if "display_as" in updates and updates["display_as"] not in ("html", "widget"):
        raise ConfigurationError("display_as must be either 'html' or 'widget'")
    CONFIG.update(updates)


def deep_merge(dict1: dict, dict2: dict) -> dict:
    """
    Recursively merge two dictionaries without mutating either.
    Values in dict2 overwrite values in dict1. If both values are dictionaries, they are merged.
    Nested dicts in the result are fresh copies.
    """
    result = {k: deep_merge(v, {}) if isinstance(v, dict) else v for k, v in dict1.items()}
    for k, v in dict2.items():
        if isinstance(v, dict):
            current = result.get(k)
            result[k] = deep_merge(current if isinstance(current, dict) else {}, v)
        else:
            result[k] = v
    return result


# %%
