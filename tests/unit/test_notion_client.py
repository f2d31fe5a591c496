"""
Tests unitarios para NotionClient, con la sesion HTTP mockeada.
"""
from unittest.mock import MagicMock, patch

import pytest
import requests

from tablesync.core.config import Settings
from tablesync.infrastructure.external.notion.notion_client import NotionClient, NotionCredentials
from tablesync.shared.exceptions.integration import FetchError, NotionApiError
from tablesync.shared.utils.pagination import resolve_relation


def _response(status_code, payload=None, headers=None, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload or {}
    resp.headers = headers or {}
    resp.text = text
    return resp


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(session):
    return NotionClient(NotionCredentials(token="secret"), session=session, max_retries=2, page_size=2)


class TestNotionClient:

    def test_retrieve_page_sends_auth_and_version(self, client, session):
        session.request.return_value = _response(200, {"id": "p1"})

        assert client.retrieve_page("p1") == {"id": "p1"}

        kwargs = session.request.call_args.kwargs
        assert kwargs["url"] == "https://api.notion.com/v1/pages/p1"
        assert kwargs["headers"]["Authorization"] == "Bearer secret"
        assert kwargs["headers"]["Notion-Version"] == "2022-06-28"

    def test_fetch_relation_page_maps_ids_and_cursor(self, client, session):
        session.request.return_value = _response(
            200,
            {
                "results": [
                    {"type": "relation", "relation": {"id": "r1"}},
                    {"type": "relation", "relation": {"id": "r2"}},
                ],
                "has_more": True,
                "next_cursor": "c2",
            },
        )

        page = client.fetch_relation_page("p1", "rel", cursor="c1")

        assert page.items == ["r1", "r2"]
        assert page.has_more is True
        assert page.next_cursor == "c2"
        assert ("start_cursor", "c1") in session.request.call_args.kwargs["params"]

    def test_client_error_raises_notion_api_error(self, client, session):
        session.request.return_value = _response(404, text="not found")

        with pytest.raises(NotionApiError) as exc:
            client.retrieve_page("missing")

        assert exc.value.status_code == 404
        assert isinstance(exc.value, FetchError)

    @patch("tablesync.infrastructure.external.notion.notion_client.time.sleep")
    def test_retries_rate_limit_then_succeeds(self, mock_sleep, client, session):
        session.request.side_effect = [
            _response(429, headers={"Retry-After": "1.5"}),
            _response(200, {"id": "p1"}),
        ]

        assert client.retrieve_page("p1") == {"id": "p1"}
        mock_sleep.assert_called_once_with(1.5)

    @patch("tablesync.infrastructure.external.notion.notion_client.time.sleep")
    def test_gives_up_after_max_retries(self, mock_sleep, client, session):
        session.request.return_value = _response(503, text="unavailable")

        with pytest.raises(NotionApiError):
            client.retrieve_page("p1")

        assert session.request.call_count == 3
        assert mock_sleep.call_count == 2

    def test_transport_error_is_wrapped(self, client, session):
        session.request.side_effect = requests.ConnectionError("boom")

        with pytest.raises(NotionApiError):
            client.retrieve_page("p1")

    def test_relation_fetcher_feeds_resolve_relation(self, client, session):
        session.request.side_effect = [
            _response(200, {"results": [{"relation": {"id": "r1"}}], "has_more": True, "next_cursor": "c2"}),
            _response(400, text="bad cursor"),
        ]

        ids = resolve_relation("p1", "rel", client.relation_page_fetcher("p1", "rel"))

        assert ids == ["r1"]

    def test_non_json_success_body_raises_notion_api_error(self, client, session):
        resp = _response(200)
        resp.json.side_effect = ValueError("Expecting value")
        session.request.return_value = resp

        with pytest.raises(NotionApiError) as exc:
            client.retrieve_page("p1")

        assert exc.value.status_code == 200

    def test_non_json_relation_page_yields_partial_result(self, client, session):
        bad = _response(200)
        bad.json.side_effect = ValueError("Expecting value")
        session.request.side_effect = [
            _response(200, {"results": [{"relation": {"id": "r1"}}], "has_more": True, "next_cursor": "c2"}),
            bad,
        ]

        ids = resolve_relation("p1", "rel", client.relation_page_fetcher("p1", "rel"))

        assert ids == ["r1"]

    def test_from_settings_requires_token(self):
        with pytest.raises(NotionApiError):
            NotionClient.from_settings(Settings(_env_file=None, NOTION_TOKEN=""))
