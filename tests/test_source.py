# tests/test_source.py
# Tests for the Cachet source client.

"""
Unit tests for fetch_snapshot and parse_components.

HTTP is served by httpx.MockTransport; nothing touches the network.
"""

import httpx
import pytest

from cachet_gating.errors import FetchError
from cachet_gating.models import Resource, ResourceStatus, SourceConfig
from cachet_gating.source import (
    COMPONENTS_PATH,
    TOKEN_HEADER,
    components_url,
    fetch_snapshot,
    parse_components,
)

from conftest import (
    RESOURCE_NAMES,
    TEST_CACHET_URL,
    components_payload,
    json_client,
    mock_client,
    normal_statuses,
)


class TestParseComponents:
    """Tests for response body parsing."""

    def test_parses_names_and_statuses(self):
        resources = parse_components(components_payload(normal_statuses()))
        by_name = {r.name: r for r in resources}
        assert sorted(by_name) == RESOURCE_NAMES
        assert by_name["brew"].status_id == ResourceStatus.OPERATIONAL
        assert by_name["rdo-cloud"].status_id == ResourceStatus.MAJOR_OUTAGE
        assert by_name["brew"].description == "brew service"

    def test_unrecognised_label_is_unknown(self):
        payload = components_payload({"brew": 9})
        (only,) = parse_components(payload)
        assert only == Resource(name="brew", status_id=ResourceStatus.UNKNOWN, description="brew service")

    def test_falls_back_to_numeric_status(self):
        payload = {"data": [{"name": "umb", "status": 3}]}
        (only,) = parse_components(payload)
        assert only.status_id == ResourceStatus.PARTIAL_OUTAGE

    def test_skips_entries_without_name(self):
        payload = {"data": [{"status": 1}, {"name": "", "status": 1}, "junk", {"name": "umb", "status": 1}]}
        assert {r.name for r in parse_components(payload)} == {"umb"}

    def test_duplicate_names_last_entry_wins(self):
        payload = {"data": [
            {"name": "umb", "status": 4},
            {"name": "brew", "status": 1},
            {"name": "umb", "status": 1},
        ]}
        resources = parse_components(payload)
        assert [r.name for r in resources] == ["brew", "umb"]
        assert resources[1].status_id == ResourceStatus.OPERATIONAL

    def test_ignores_unknown_fields(self):
        payload = {"data": [{"name": "umb", "status_name": "Operational", "whatever": {"x": 1}}], "extra": True}
        (only,) = parse_components(payload)
        assert only.is_operational

    @pytest.mark.parametrize("payload", [None, [], {}, {"data": {}}, {"data": "nope"}])
    def test_missing_data_list_raises(self, payload):
        with pytest.raises(FetchError):
            parse_components(payload, "http://src")


class TestFetchSnapshot:
    """Tests for fetch_snapshot over a mock transport."""

    def test_fetch_ok(self, source):
        with json_client(components_payload(normal_statuses())) as client:
            resources = fetch_snapshot(source, client=client)
        assert len(resources) == 11

    def test_request_shape(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": []})

        config = SourceConfig(base_url=TEST_CACHET_URL + "/", auth_token="s3cret")
        with mock_client(handler) as client:
            assert fetch_snapshot(config, client=client) == []

        assert len(seen) == 1
        request = seen[0]
        assert request.method == "GET"
        assert request.url.path == "/cachet" + COMPONENTS_PATH
        assert request.headers[TOKEN_HEADER] == "s3cret"
        assert "per_page" in request.url.params
        assert components_url(config) == TEST_CACHET_URL + COMPONENTS_PATH

    def test_no_token_header_without_token(self, source):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": []})

        with mock_client(handler) as client:
            fetch_snapshot(source, client=client)
        assert TOKEN_HEADER not in seen[0].headers

    @pytest.mark.parametrize("status_code", [401, 404, 500, 503])
    def test_non_2xx_raises(self, source, status_code):
        with json_client({"data": []}, status_code=status_code) as client:
            with pytest.raises(FetchError) as exc_info:
                fetch_snapshot(source, client=client)
        assert str(status_code) in exc_info.value.message
        assert exc_info.value.source_url == TEST_CACHET_URL

    def test_invalid_json_raises(self, source):
        with mock_client(lambda request: httpx.Response(200, content=b"<html>")) as client:
            with pytest.raises(FetchError, match="invalid JSON"):
                fetch_snapshot(source, client=client)

    def test_timeout_raises(self, source):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with mock_client(handler) as client:
            with pytest.raises(FetchError, match="timed out"):
                fetch_snapshot(source, timeout=2.0, client=client)

    def test_connection_error_raises(self, source):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with mock_client(handler) as client:
            with pytest.raises(FetchError, match="request failed"):
                fetch_snapshot(source, client=client)

    def test_supplied_client_left_open(self, source):
        client = json_client({"data": []})
        fetch_snapshot(source, client=client)
        assert not client.is_closed
        client.close()

    def test_malformed_url_raises_fetch_error(self):
        config = SourceConfig(base_url="http://[::1")
        with pytest.raises(FetchError, match="request failed") as exc_info:
            fetch_snapshot(config, timeout=1.0)
        assert exc_info.value.source_url == "http://[::1"

    def test_host_encoding_error_is_not_reported_as_json(self, source):
        def handler(request: httpx.Request) -> httpx.Response:
            raise UnicodeError("label empty or too long")

        with mock_client(handler) as client:
            with pytest.raises(FetchError, match="request failed"):
                fetch_snapshot(source, client=client)
