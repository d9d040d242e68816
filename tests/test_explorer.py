"""Tests for the explorer CLI."""
import argparse
from unittest import mock

import explorer
from finna.config import Config
from finna.models import CatalogRecord, SearchResult


def _search_args(**overrides):
    values = {
        "query": "moomin",
        "limit": 10,
        "page": 1,
        "pages": 3,
        "language": "fi",
        "sort": None,
        "format": "compact",
    }
    values.update(overrides)
    return argparse.Namespace(**values)


def test_sync_search_uses_requested_pages(capsys):
    """The sync search fetches every requested page and merges them."""
    pages = [
        SearchResult(result_count=3, records=[CatalogRecord("1", "Muumipeikko")]),
        SearchResult(result_count=3, records=[CatalogRecord("2", "Taikurin hattu"), CatalogRecord("1", "Muumipeikko")]),
    ]

    with mock.patch.object(explorer, "FinnaClient") as client_class:
        client = client_class.return_value.__enter__.return_value
        client.search_pages.return_value = pages

        assert explorer.search_records_sync(_search_args(), Config())

    args, kwargs = client.search_pages.call_args
    assert args[0] == "moomin"
    assert args[1] == 3
    assert args[2].limit == 10

    output = capsys.readouterr().out
    assert "1. Muumipeikko - Unknown" in output
    assert "2. Taikurin hattu - Unknown" in output
    assert output.count("Muumipeikko") == 1


def test_sync_search_reports_failure():
    """No successful page means a failed search."""
    with mock.patch.object(explorer, "FinnaClient") as client_class:
        client_class.return_value.__enter__.return_value.search_pages.return_value = []

        assert not explorer.search_records_sync(_search_args(pages=1), Config())
