# tests/conftest.py
# Pytest configuration and fixtures for cachet-gating tests.

"""
Shared pytest fixtures for testing the library.

Provides:
- Cachet component payloads for a normal day and a brew outage
- httpx clients backed by MockTransport
- Registries seeded through set_resources_for_tests
"""

import json
from typing import Any, Callable

import httpx
import pytest

from cachet_gating.models import Resource, ResourceStatus, SourceConfig
from cachet_gating.registry import ResourceRegistry
from cachet_gating.source import fetch_snapshot

TEST_CACHET_URL = "http://localhost:32000/cachet"

RESOURCE_NAMES = [
    "brew",
    "ci-rhos",
    "covscan",
    "dummy",
    "errata",
    "gerrit.host.prod.eng.bos.redhat.com",
    "polarion",
    "rdo-cloud",
    "rpmdiff",
    "umb",
    "zabbix-sysops",
]

STATUS_LABELS = {
    1: "Operational",
    2: "Performance Issues",
    3: "Partial Outage",
    4: "Major Outage",
}


def components_payload(statuses: dict[str, int]) -> dict[str, Any]:
    """Build a Cachet /api/v1/components body from name -> status code."""
    data = []
    for index, (name, code) in enumerate(statuses.items(), start=1):
        data.append({
            "id": index,
            "name": name,
            "description": f"{name} service",
            "link": "",
            "status": code,
            "order": 0,
            "group_id": 1,
            "enabled": True,
            "status_name": STATUS_LABELS.get(code, "Mystery"),
            "tags": {},
        })
    return {
        "meta": {
            "pagination": {
                "total": len(data),
                "count": len(data),
                "per_page": 1000,
                "current_page": 1,
                "total_pages": 1,
                "links": {"next_page": None, "previous_page": None},
            }
        },
        "data": data,
    }


def normal_statuses() -> dict[str, int]:
    statuses = {name: 1 for name in RESOURCE_NAMES}
    statuses["rdo-cloud"] = 4
    return statuses


def brew_outage_statuses() -> dict[str, int]:
    statuses = normal_statuses()
    statuses["brew"] = 4
    return statuses


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def json_client(payload: Any, status_code: int = 200) -> httpx.Client:
    """Client that answers every request with the same JSON body."""
    body = json.dumps(payload)
    return mock_client(
        lambda request: httpx.Response(
            status_code, content=body, headers={"Content-Type": "text/json"}
        )
    )


@pytest.fixture
def source() -> SourceConfig:
    return SourceConfig(base_url=TEST_CACHET_URL, auth_token="", insecure_tls=False)


@pytest.fixture
def normal_resources(source: SourceConfig) -> list[Resource]:
    with json_client(components_payload(normal_statuses())) as client:
        return fetch_snapshot(source, client=client)


@pytest.fixture
def brew_outage_resources(source: SourceConfig) -> list[Resource]:
    with json_client(components_payload(brew_outage_statuses())) as client:
        return fetch_snapshot(source, client=client)


@pytest.fixture
def registry(source: SourceConfig, normal_resources: list[Resource]) -> ResourceRegistry:
    """Registry seeded with the normal snapshot; never touches the network."""
    reg = ResourceRegistry(sources=[source])
    reg.set_resources_for_tests(normal_resources)
    return reg


@pytest.fixture
def empty_registry() -> ResourceRegistry:
    return ResourceRegistry()


def resource(name: str, status: ResourceStatus) -> Resource:
    return Resource(name=name, status_id=status)


# Markers for special test categories
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "slow: tests that take significant time")
    config.addinivalue_line(
        "markers", "integration: integration tests requiring external services"
    )
