"""
Client for publishing figures to a plotly-compatible hosting service (v2 REST API).

Requests are blocking, bounded by a timeout, and never retried; failures
surface as PublishError subclasses for the caller to handle.
"""

import logging
from dataclasses import dataclass
from typing import Any

import requests

import figstudio
from figstudio.errors import AuthenticationError, ConfigurationError, NetworkError, PublishError
from figstudio.util import CONFIG
from figstudio.widget import to_json

logger = logging.getLogger(__name__)

SHARING = ("public", "private", "secret")
FILEOPTS = ("overwrite", "new")


@dataclass(frozen=True)
class HostedFigure:
    """Reference to a figure stored by the hosting service."""

    url: str
    fid: str
    filename: str | None = None

    def __str__(self) -> str:
        return self.url


def _credentials(username: str | None, api_key: str | None) -> tuple[str, str]:
    username = username or CONFIG["username"]
    api_key = api_key or CONFIG["api_key"]
    if not username or not api_key:
        raise AuthenticationError(
            "Publishing requires a username and API key; pass them explicitly, "
            "call configure(username=..., api_key=...) or set "
            "FIGSTUDIO_USERNAME and FIGSTUDIO_API_KEY"
        )
    return username, api_key


def _headers() -> dict[str, str]:
    return {
        "plotly-client-platform": f"python-figstudio {figstudio.__version__}",
        "content-type": "application/json",
    }


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason or ""
    errors = body.get("errors") if isinstance(body, dict) else None
    if errors:
        return "; ".join(str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors)
    return str(body)


def _check(response: requests.Response, url: str) -> Any:
    if response.status_code in (401, 403):
        logger.warning("Hosting service refused credentials (HTTP %s)", response.status_code)
        raise AuthenticationError(
            f"Authentication failed: {_error_message(response)}",
            status_code=response.status_code,
            context={"url": url},
        )
    if not 200 <= response.status_code < 300:
        logger.warning("Hosting service returned HTTP %s for %s", response.status_code, url)
        raise PublishError(
            f"Hosting service returned HTTP {response.status_code}: {_error_message(response)}",
            status_code=response.status_code,
            context={"url": url},
        )
    try:
        return response.json()
    except ValueError:
        raise PublishError(
            "Hosting service returned a response that is not JSON",
            status_code=response.status_code,
            context={"url": url},
        ) from None


def _request(method: str, url: str, timeout: float | None, **kwargs: Any) -> requests.Response:
    timeout = timeout if timeout is not None else CONFIG["timeout"]
    try:
        return requests.request(method, url, timeout=timeout, **kwargs)
    except requests.exceptions.Timeout as e:
        logger.warning("Request to %s timed out after %ss", url, timeout)
        raise NetworkError(
            f"Request to {url} timed out after {timeout}s", context={"url": url}
        ) from e
    except requests.exceptions.RequestException as e:
        logger.warning("Request to %s failed: %s", url, e)
        raise NetworkError(f"Request to {url} failed: {e}", context={"url": url}) from e


def publish(
    item: Any,
    filename: str | None = None,
    sharing: str = "public",
    fileopt: str = "overwrite",
    username: str | None = None,
    api_key: str | None = None,
    domain: str | None = None,
    timeout: float | None = None,
) -> HostedFigure:
    """
    Upload a figure to the hosting service.

    Args:
        item: A ChartSpec, Row/Column, or a plotly figure dict.
        filename: Name of the hosted file; the service picks one if omitted.
        sharing: 'public', 'private' or 'secret'.
        fileopt: 'overwrite' replaces an existing file of the same name, 'new' always creates one.
        username, api_key: Credentials; default to the configured values.
        domain: Base URL of the service; defaults to CONFIG["domain"].
        timeout: Seconds to wait for the response; defaults to CONFIG["timeout"].

    Returns:
        A HostedFigure with the figure's URL and file id.

    Raises:
        ConfigurationError: for an invalid `sharing` or `fileopt` value.
        AuthenticationError: when credentials are missing or refused.
        NetworkError: when the service cannot be reached in time.
        PublishError: for any other rejected request or malformed response.
    """
    if sharing not in SHARING:
        raise ConfigurationError(
            f"sharing must be one of {', '.join(SHARING)}", context={"sharing": sharing}
        )
    if fileopt not in FILEOPTS:
        raise ConfigurationError(
            f"fileopt must be one of {', '.join(FILEOPTS)}", context={"fileopt": fileopt}
        )
    auth = _credentials(username, api_key)
    figure = item.to_figure() if hasattr(item, "to_figure") else item

    payload: dict[str, Any] = {
        "figure": to_json(figure),
        "world_readable": sharing == "public",
        "fileopt": fileopt,
    }
    if filename:
        payload["filename"] = filename
    if sharing == "secret":
        payload["share_key_enabled"] = True

    url = f"{(domain or CONFIG['domain']).rstrip('/')}/v2/plots"
    logger.info("Publishing figure %r (%s) to %s", filename, sharing, url)
    response = _request("POST", url, timeout, json=payload, auth=auth, headers=_headers())
    body = _check(response, url)

    file_info = body.get("file") if isinstance(body, dict) else None
    if not isinstance(file_info, dict) or "web_url" not in file_info:
        raise PublishError(
            "Hosting service response is missing the figure URL",
            status_code=response.status_code,
            context={"url": url},
        )
    web_url = file_info["web_url"]
    if sharing == "secret" and file_info.get("share_key"):
        web_url = f"{web_url}?share_key={file_info['share_key']}"
    hosted = HostedFigure(
        url=web_url, fid=file_info.get("fid", ""), filename=file_info.get("filename", filename)
    )
    logger.info("Published figure %s", hosted.url)
    return hosted


def fetch_figure(
    fid: str,
    username: str | None = None,
    api_key: str | None = None,
    domain: str | None = None,
    timeout: float | None = None,
) -> dict[str, Any]:
    """
    Download a hosted figure (with its data inlined) as a plotly figure dict.
    """
    auth = _credentials(username, api_key)
    url = f"{(domain or CONFIG['domain']).rstrip('/')}/v2/plots/{fid}/content"
    logger.info("Fetching figure %s from %s", fid, url)
    response = _request(
        "GET", url, timeout, params={"inline_data": "true"}, auth=auth, headers=_headers()
    )
    body = _check(response, url)
    if not isinstance(body, dict) or "data" not in body:
        raise PublishError(
            "Hosting service response is not a figure",
            status_code=response.status_code,
            context={"url": url},
        )
    return {"data": body["data"], "layout": body.get("layout", {})}
