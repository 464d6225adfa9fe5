# src/cachet_gating/source.py
# HTTP client that fetches component statuses from one Cachet endpoint.

"""
Source client for the Cachet components API.

    resources = fetch_snapshot(SourceConfig(base_url="https://status.example.com"))

Issues a single GET against {base_url}/api/v1/components and parses the
`data` list into Resource values. Any transport, HTTP status or body problem
is raised as FetchError; the registry decides what to do with it.
"""

import logging
from typing import Any, Optional

import httpx

from cachet_gating.errors import FetchError
from cachet_gating.models import Resource, SourceConfig, parse_status

logger = logging.getLogger(__name__)

COMPONENTS_PATH = "/api/v1/components"
TOKEN_HEADER = "X-Cachet-Token"
DEFAULT_TIMEOUT = 10.0
DEFAULT_PAGE_SIZE = 1000


def components_url(config: SourceConfig) -> str:
    """Full components endpoint URL for a source."""
    return f"{config.base_url}{COMPONENTS_PATH}"


def parse_components(payload: Any, source_url: str = "") -> list[Resource]:
    """
    Parse a Cachet components response body.

    Unknown fields are ignored and unrecognised status labels become UNKNOWN.
    Entries without a usable name are skipped. Resources come back in
    payload order; when a name repeats, its last entry wins.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
        raise FetchError(source_url, "response has no 'data' list")

    resources: dict[str, Resource] = {}
    for entry in payload["data"]:
        if not isinstance(entry, dict):
            continue
        name = entry.get("name")
        if not isinstance(name, str) or not name:
            continue
        # status_name is the human readable label; status is the numeric code
        label = entry.get("status_name")
        if label is None:
            label = entry.get("status")
        description = entry.get("description")
        resources.pop(name, None)
        resources[name] = Resource(
            name=name,
            status_id=parse_status(label),
            description=description if isinstance(description, str) else "",
        )
    return list(resources.values())


def fetch_snapshot(
    config: SourceConfig,
    timeout: float = DEFAULT_TIMEOUT,
    client: Optional[httpx.Client] = None,
) -> list[Resource]:
    """
    Fetch the current set of resources from one source.

    Args:
        config: Source to query.
        timeout: Request timeout in seconds.
        client: Optional pre-built client (tests pass one with a MockTransport).

    Raises:
        FetchError: on network errors, timeouts, non-2xx responses or an
            unparseable body.
    """
    url = components_url(config)
    headers = {"Accept": "application/json"}
    if config.auth_token:
        headers[TOKEN_HEADER] = config.auth_token
    params = {"per_page": DEFAULT_PAGE_SIZE}

    owns_client = client is None
    if client is None:
        client = httpx.Client(verify=not config.insecure_tls, timeout=timeout)

    try:
        response = client.get(url, headers=headers, params=params, timeout=timeout)
        response.raise_for_status()
    except httpx.TimeoutException as e:
        raise FetchError(config.base_url, f"request timed out after {timeout}s") from e
    except httpx.HTTPStatusError as e:
        raise FetchError(
            config.base_url, f"HTTP {e.response.status_code} from {url}"
        ) from e
    except (httpx.HTTPError, httpx.InvalidURL, UnicodeError) as e:
        # InvalidURL is not an HTTPError; IDNA host encoding raises UnicodeError
        raise FetchError(config.base_url, f"request failed: {e}") from e
    finally:
        if owns_client:
            client.close()

    try:
        payload = response.json()
    except ValueError as e:
        raise FetchError(config.base_url, f"invalid JSON body: {e}") from e

    resources = parse_components(payload, config.base_url)
    logger.debug("Fetched %d resources from %s", len(resources), config.base_url)
    return resources
