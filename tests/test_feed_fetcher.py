"""Tests for HttpFeedFetcher (mocked requests session) and FileFeedFetcher."""

import json
from unittest.mock import MagicMock

import pytest
import requests

from beerfest.errors import FetchError
from beerfest.feed.fetcher import FileFeedFetcher, HttpFeedFetcher

from conftest import make_feed, make_producer


def _response(body: bytes, status: int = 200) -> MagicMock:
    response = MagicMock()
    response.content = body
    response.status_code = status
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} Error")
    return response


def _session(*outcomes) -> MagicMock:
    """Session whose get() returns (or raises) each outcome in turn."""
    session = MagicMock(spec=requests.Session)
    session.get.side_effect = list(outcomes)
    return session


class TestSingleUrl:
    def test_returns_body(self):
        body = make_feed(make_producer())
        session = _session(_response(body))
        fetcher = HttpFeedFetcher(["https://feed.test/beer.json"], session=session)

        assert fetcher.fetch() == body

    def test_passes_caller_timeout(self):
        session = _session(_response(b"{}"))
        fetcher = HttpFeedFetcher(["https://feed.test/beer.json"], session=session, default_timeout=30)

        fetcher.fetch(timeout=2.5)

        session.get.assert_called_once_with("https://feed.test/beer.json", timeout=2.5)

    def test_uses_default_timeout(self):
        session = _session(_response(b"{}"))
        fetcher = HttpFeedFetcher(["https://feed.test/beer.json"], session=session, default_timeout=7)

        fetcher.fetch()

        session.get.assert_called_once_with("https://feed.test/beer.json", timeout=7)

    def test_timeout_raises_fetch_error_with_flag(self):
        session = _session(requests.Timeout("read timed out"))
        fetcher = HttpFeedFetcher(["https://feed.test/beer.json"], session=session)

        with pytest.raises(FetchError) as exc_info:
            fetcher.fetch(timeout=1)
        assert exc_info.value.timeout is True

    def test_connection_error(self):
        session = _session(requests.ConnectionError("no route to host"))
        fetcher = HttpFeedFetcher(["https://feed.test/beer.json"], session=session)

        with pytest.raises(FetchError) as exc_info:
            fetcher.fetch()
        assert exc_info.value.timeout is False
        assert exc_info.value.context["url"] == "https://feed.test/beer.json"

    def test_http_status_error(self):
        session = _session(_response(b"Not Found", status=404))
        fetcher = HttpFeedFetcher(["https://feed.test/beer.json"], session=session)

        with pytest.raises(FetchError):
            fetcher.fetch()

    def test_requires_a_url(self):
        with pytest.raises(ValueError):
            HttpFeedFetcher([], session=MagicMock())


class TestMultipleUrls:
    URLS = ["https://feed.test/beer.json", "https://feed.test/cider.json"]

    def test_concatenates_producers(self):
        beer = make_feed(make_producer("P1", "Milton"))
        cider = make_feed(make_producer("P2", "Cromwell Cider"))
        fetcher = HttpFeedFetcher(self.URLS, session=_session(_response(beer), _response(cider)))

        document = json.loads(fetcher.fetch())

        assert [p["id"] for p in document["producers"]] == ["P1", "P2"]

    def test_failed_url_is_skipped(self):
        cider = make_feed(make_producer("P2", "Cromwell Cider"))
        session = _session(requests.ConnectionError("down"), _response(cider))
        fetcher = HttpFeedFetcher(self.URLS, session=session)

        document = json.loads(fetcher.fetch())

        assert [p["id"] for p in document["producers"]] == ["P2"]

    def test_invalid_document_is_skipped(self):
        cider = make_feed(make_producer("P2", "Cromwell Cider"))
        fetcher = HttpFeedFetcher(self.URLS, session=_session(_response(b"<html>"), _response(cider)))

        document = json.loads(fetcher.fetch())

        assert len(document["producers"]) == 1

    def test_all_urls_failing_raises(self):
        session = _session(requests.ConnectionError("down"), requests.Timeout("slow"))
        fetcher = HttpFeedFetcher(self.URLS, session=session)

        with pytest.raises(FetchError) as exc_info:
            fetcher.fetch()
        assert exc_info.value.timeout is True

    def test_no_valid_document_returns_first_body(self):
        fetcher = HttpFeedFetcher(self.URLS, session=_session(_response(b"<html>"), _response(b"[]")))
        assert fetcher.fetch() == b"<html>"


class TestFileFeedFetcher:
    def test_reads_file(self, tmp_path):
        path = tmp_path / "beer.json"
        path.write_bytes(b'{"producers": []}')
        assert FileFeedFetcher(str(path)).fetch() == b'{"producers": []}'

    def test_missing_file_raises_fetch_error(self, tmp_path):
        with pytest.raises(FetchError):
            FileFeedFetcher(str(tmp_path / "missing.json")).fetch()
