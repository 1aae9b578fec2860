"""
feed_sources モジュールのユニットテスト（HTTP はモック）
"""

import pytest
import requests

from robodigest import feed_sources
from robodigest.feed_sources import FetchError, build_paper_query, fetch_papers, fetch_videos

ARXIV_XML = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>ArXiv Query</title>
  <entry>
    <id>http://arxiv.org/abs/2602.00001v1</id>
    <published>2026-02-18T10:00:00Z</published>
    <title>Warehouse Robots
      at Scale</title>
    <summary>We present a system
for fleet management.</summary>
  </entry>
  <entry>
    <id>http://arxiv.org/abs/2602.00002v1</id>
    <published>2026-02-17T10:00:00Z</published>
    <title>ROS 2 Simulation</title>
    <summary>Benchmarks.</summary>
  </entry>
</feed>
"""

EMPTY_XML = '<feed xmlns="http://www.w3.org/2005/Atom"><title>ArXiv Query</title></feed>'


class FakeResponse:
    def __init__(self, text="", json_data=None, status_code=200):
        self.text = text
        self._json = json_data
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self._json is None:
            raise ValueError("no json")
        return self._json


@pytest.fixture
def captured(monkeypatch):
    """requests.get を差し替え、呼び出し引数を記録する"""
    calls = []
    responses = []

    def fake_get(url, params=None, timeout=None):
        calls.append({"url": url, "params": params})
        return responses.pop(0)

    monkeypatch.setattr(feed_sources.requests, "get", fake_get)
    return calls, responses


class TestFetchPapers:
    def test_parses_entries(self, captured):
        calls, responses = captured
        responses.append(FakeResponse(text=ARXIV_XML))

        papers = fetch_papers()
        assert [p.id for p in papers] == [
            "http://arxiv.org/abs/2602.00001v1",
            "http://arxiv.org/abs/2602.00002v1",
        ]
        assert papers[0].title == "Warehouse Robots at Scale"
        assert papers[0].summary == "We present a system for fleet management."
        assert papers[0].link == papers[0].id
        assert papers[0].published == "2026-02-18T10:00:00Z"
        assert calls[0]["params"]["search_query"] == feed_sources.DEFAULT_PAPER_QUERY
        assert calls[0]["params"]["sortOrder"] == "descending"

    def test_keyword_and_invalid_sort(self, captured):
        calls, responses = captured
        responses.append(FakeResponse(text=EMPTY_XML))

        assert fetch_papers(query="SLAM", sort_by="bogus") == []
        assert calls[0]["params"]["search_query"] == 'cat:cs.RO AND all:"SLAM"'
        assert calls[0]["params"]["sortBy"] == "submittedDate"

    def test_http_error_raises_fetch_error(self, captured):
        _, responses = captured
        responses.append(FakeResponse(status_code=503))
        with pytest.raises(FetchError):
            fetch_papers()

    def test_broken_xml_raises_fetch_error(self, captured):
        _, responses = captured
        responses.append(FakeResponse(text="<feed"))
        with pytest.raises(FetchError):
            fetch_papers()

    def test_blank_keyword_uses_default_query(self):
        assert build_paper_query("   ") == feed_sources.DEFAULT_PAPER_QUERY


class TestFetchVideos:
    def test_parses_page(self, captured):
        calls, responses = captured
        responses.append(FakeResponse(json_data={
            "items": [
                {
                    "id": {"videoId": "abc"},
                    "snippet": {
                        "title": "ROS 2 入門",
                        "description": "説明",
                        "thumbnails": {"default": {"url": "https://i.ytimg.com/default.jpg"}},
                        "channelTitle": "Robo Channel",
                        "publishedAt": "2026-02-10T00:00:00Z",
                    },
                },
                {"id": {"channelId": "UCxxx"}, "snippet": {"title": "channel"}},
            ],
            "nextPageToken": "NEXT",
            "pageInfo": {"totalResults": 42},
        }))

        page = fetch_videos("key", query="humanoid", order="viewCount", max_results=100, page_token="PREV")
        assert [v.id for v in page.videos] == ["abc"]
        video = page.videos[0]
        assert video.thumbnail == "https://i.ytimg.com/default.jpg"
        assert video.channel_title == "Robo Channel"
        assert video.link == "https://www.youtube.com/watch?v=abc"
        assert page.next_page_token == "NEXT"
        assert page.total_results == 42

        params = calls[0]["params"]
        assert params["maxResults"] == 50
        assert params["pageToken"] == "PREV"
        assert params["order"] == "viewCount"
        assert params["regionCode"] == "JP"

    def test_defaults(self, captured):
        calls, responses = captured
        responses.append(FakeResponse(json_data={}))

        page = fetch_videos("key", order="nope")
        assert page.videos == []
        assert page.next_page_token is None
        assert calls[0]["params"]["q"] == feed_sources.DEFAULT_VIDEO_QUERY
        assert calls[0]["params"]["order"] == "date"
        assert "pageToken" not in calls[0]["params"]

    def test_missing_api_key(self):
        with pytest.raises(FetchError):
            fetch_videos("")

    def test_http_error_raises_fetch_error(self, captured):
        _, responses = captured
        responses.append(FakeResponse(status_code=403))
        with pytest.raises(FetchError):
            fetch_videos("key")
