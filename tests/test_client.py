"""Tests for the sync and async API clients."""
import asyncio
from unittest import mock

import httpx
import pytest
import requests

from finna.async_client import AsyncFinnaClient
from finna.client import FinnaClient, search_params
from finna.config import Config, SearchOptions
from finna.exceptions import InvalidResponseShape


def _response(status_code, payload=None):
    response = mock.Mock()
    response.status_code = status_code
    response.json.return_value = payload
    response.text = ""
    return response


def test_search_options_params():
    """Options map to Finna query parameters."""
    params = SearchOptions(limit=500, page=0, language="fi", sort_order="main_date_str desc").to_params()

    assert params == {"limit": 100, "page": 1, "lng": "fi", "sort": "main_date_str desc"}
    assert "sort" not in SearchOptions().to_params()


def test_config_search_options_defaults():
    """Config fills unset options from its defaults."""
    options = Config().search_options(page=2)

    assert options.page == 2
    assert options.limit == Config.DEFAULT_PAGE_SIZE
    assert options.language == Config.FINNA_LANGUAGE


def test_search_params_validates_query():
    """Queries shorter than two characters are rejected."""
    with pytest.raises(ValueError):
        search_params(" a ", SearchOptions())

    params = search_params("  moomin ", SearchOptions())
    assert params["lookfor"] == "moomin"
    assert params["type"] == "AllFields"


def test_search_returns_parsed_result():
    """A successful search is parsed into a SearchResult."""
    client = FinnaClient(base_url="https://api.example/v1")
    payload = {"resultCount": 1, "records": [{"id": "1", "title": "Book", "authors": "Author"}]}

    with mock.patch.object(client.session, "get", return_value=_response(200, payload)) as get:
        result = client.search("book", SearchOptions(limit=5))

    assert result.result_count == 1
    assert result.records[0].authors == ["Author"]
    args, kwargs = get.call_args
    assert args[0] == "https://api.example/v1/search"
    assert kwargs["params"]["limit"] == 5


def test_search_retries_then_succeeds():
    """Server errors are retried with backoff."""
    client = FinnaClient(max_retries=3)
    responses = [_response(503), _response(200, {"records": []})]

    with mock.patch.object(client.session, "get", side_effect=responses), \
            mock.patch.object(client, "_backoff") as backoff:
        result = client.search("book")

    assert result.records == []
    backoff.assert_called_once_with(0)


def test_search_gives_up_after_retries():
    """Timeouts on every attempt return None."""
    client = FinnaClient(max_retries=2)

    with mock.patch.object(client.session, "get", side_effect=requests.exceptions.Timeout), \
            mock.patch.object(client, "_backoff"):
        assert client.search("book") is None


def test_client_error_not_retried():
    """4xx responses other than 429 return None immediately."""
    client = FinnaClient(max_retries=3)

    with mock.patch.object(client.session, "get", return_value=_response(404)) as get:
        assert client.get_record("missing") is None

    assert get.call_count == 1


def test_get_record_bare_object():
    """A bare record response is normalized into a detail."""
    client = FinnaClient()
    payload = {"id": "x123", "holdings": [{"location": "Central", "available": 1}]}

    with mock.patch.object(client.session, "get", return_value=_response(200, payload)):
        detail = client.get_record("x123", language="fi")

    assert detail.id == "x123"
    assert detail.title == "Untitled"
    assert detail.availability.available == 1


def test_get_record_invalid_shape():
    """An envelope without a record propagates InvalidResponseShape."""
    client = FinnaClient()

    with mock.patch.object(client.session, "get", return_value=_response(200, {"records": []})):
        with pytest.raises(InvalidResponseShape):
            client.get_record("x123")


def test_get_record_requires_id():
    """An empty record ID is rejected before any request."""
    with pytest.raises(ValueError):
        FinnaClient().get_record("")


def test_async_search_pages():
    """Pages are fetched concurrently and returned in page order."""
    def handler(request):
        page = int(request.url.params["page"])
        if page == 3:
            return httpx.Response(500)
        return httpx.Response(200, json={
            "resultCount": 40,
            "records": [{"id": f"p{page}", "title": f"Page {page}"}],
        })

    async def run():
        async with AsyncFinnaClient(transport=httpx.MockTransport(handler)) as client:
            return await client.search_pages("moomin", pages=3, options=SearchOptions(limit=1))

    results = asyncio.run(run())

    assert [r.records[0].id for r in results] == ["p1", "p2"]


def test_async_get_record_envelope():
    """The async client resolves results envelopes too."""
    def handler(request):
        assert request.url.params["id"] == "abc"
        return httpx.Response(200, json={"records": [{"id": "abc", "title": "Kalevala"}]})

    async def run():
        async with AsyncFinnaClient(transport=httpx.MockTransport(handler)) as client:
            return await client.get_record("abc")

    detail = asyncio.run(run())

    assert detail.title == "Kalevala"


def test_search_pages_fetches_consecutive_pages():
    """Sync page fetching walks forward from the first page and skips failures."""
    client = FinnaClient(max_retries=1)
    responses = [
        _response(200, {"resultCount": 30, "records": [{"id": "p2"}]}),
        _response(404),
        _response(200, {"resultCount": 30, "records": [{"id": "p4"}]}),
    ]

    with mock.patch.object(client.session, "get", side_effect=responses) as get:
        results = client.search_pages("moomin", pages=3, options=SearchOptions(page=2))

    assert [r.records[0].id for r in results] == ["p2", "p4"]
    assert [c.kwargs["params"]["page"] for c in get.call_args_list] == [2, 3, 4]
