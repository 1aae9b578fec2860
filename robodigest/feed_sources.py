"""
arXiv API / YouTube Data API からフィードを取得するモジュール。

どちらも1回だけリクエストし、失敗時は FetchError を送出する（リトライなし）。
"""

import xml.etree.ElementTree as ET
from typing import Optional

import requests

from .models import Paper, Video, VideoPage
from .utils import collapse_newlines, get_logger

logger = get_logger(__name__)

REQUEST_TIMEOUT = 20  # 秒

# --- arXiv ---
ARXIV_BASE_URL = "http://export.arxiv.org/api/query"
DEFAULT_PAPER_QUERY = 'cat:cs.RO AND ("ROS 2" OR logistics OR warehouse OR simulation)'
PAPER_SORT_OPTIONS = ("submittedDate", "relevance", "lastUpdatedDate")
DEFAULT_PAPER_SORT = "submittedDate"
ATOM_NS = {"a": "http://www.w3.org/2005/Atom"}

# --- YouTube ---
YOUTUBE_API_URL = "https://www.googleapis.com/youtube/v3/search"
DEFAULT_VIDEO_QUERY = "robotics ROS2"
VIDEO_ORDER_OPTIONS = ("date", "relevance", "viewCount", "rating")
DEFAULT_VIDEO_ORDER = "date"
MAX_VIDEO_PAGE_SIZE = 50


class FetchError(Exception):
    """フィード取得の失敗（通信エラー・非200応答・不正なレスポンス）"""


def build_paper_query(keyword: Optional[str] = None) -> str:
    """キーワードがあれば cs.RO 内の全フィールド検索、なければ既定のクエリ"""
    keyword = (keyword or "").strip()
    if keyword:
        return f'cat:cs.RO AND all:"{keyword}"'
    return DEFAULT_PAPER_QUERY


def parse_arxiv_feed(xml_text: str) -> list[Paper]:
    """arXiv の Atom フィードを Paper のリストに変換する"""
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise FetchError(f"arXiv レスポンスの XML パースに失敗: {e}") from e

    papers: list[Paper] = []
    for entry in root.findall("a:entry", ATOM_NS):
        entry_id = (entry.findtext("a:id", default="", namespaces=ATOM_NS) or "").strip()
        if not entry_id:
            continue
        papers.append(Paper(
            id=entry_id,
            title=collapse_newlines(entry.findtext("a:title", default="", namespaces=ATOM_NS)),
            summary=collapse_newlines(entry.findtext("a:summary", default="", namespaces=ATOM_NS)),
            published=(entry.findtext("a:published", default="", namespaces=ATOM_NS) or "").strip(),
            link=entry_id,
        ))
    return papers


def fetch_papers(
    query: Optional[str] = None,
    sort_by: str = DEFAULT_PAPER_SORT,
    max_results: int = 10,
) -> list[Paper]:
    """
    arXiv から cs.RO の論文を新しい順に取得する。

    Args:
        query: 検索キーワード（None / 空なら既定のクエリ）
        sort_by: submittedDate / relevance / lastUpdatedDate（不正値は submittedDate）
        max_results: 取得件数

    Returns:
        Paper のリスト（該当なしなら空）

    Raises:
        FetchError: 取得に失敗した場合
    """
    if sort_by not in PAPER_SORT_OPTIONS:
        sort_by = DEFAULT_PAPER_SORT

    params = {
        "search_query": build_paper_query(query),
        "start": 0,
        "max_results": max_results,
        "sortBy": sort_by,
        "sortOrder": "descending",
    }
    try:
        response = requests.get(ARXIV_BASE_URL, params=params, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as e:
        raise FetchError(f"arXiv API の呼び出しに失敗: {e}") from e

    papers = parse_arxiv_feed(response.text)
    logger.info(f"arXiv から {len(papers)} 件の論文を取得しました (query={query!r}, sortBy={sort_by})")
    return papers


def _parse_video_item(item: dict) -> Optional[Video]:
    video_id = (item.get("id") or {}).get("videoId")
    if not video_id:
        return None
    snippet = item.get("snippet") or {}
    thumbnails = snippet.get("thumbnails") or {}
    thumbnail = (
        (thumbnails.get("medium") or {}).get("url")
        or (thumbnails.get("default") or {}).get("url")
        or ""
    )
    return Video(
        id=video_id,
        title=snippet.get("title", ""),
        description=snippet.get("description", ""),
        thumbnail=thumbnail,
        channel_title=snippet.get("channelTitle", ""),
        published_at=snippet.get("publishedAt", ""),
        link=f"https://www.youtube.com/watch?v={video_id}",
    )


def parse_video_response(data: dict) -> VideoPage:
    """YouTube search API のレスポンスを VideoPage に変換する"""
    videos = [
        video for video in (_parse_video_item(item) for item in data.get("items") or [])
        if video is not None
    ]
    return VideoPage(
        videos=videos,
        next_page_token=data.get("nextPageToken") or None,
        total_results=int((data.get("pageInfo") or {}).get("totalResults") or 0),
    )


def fetch_videos(
    api_key: str,
    query: Optional[str] = None,
    order: str = DEFAULT_VIDEO_ORDER,
    max_results: int = 10,
    page_token: Optional[str] = None,
) -> VideoPage:
    """
    YouTube Data API v3 で動画を検索する。

    Args:
        api_key: YouTube API キー
        query: 検索キーワード（None / 空なら既定のクエリ）
        order: date / relevance / viewCount / rating（不正値は date）
        max_results: 1ページの件数（上限50）
        page_token: 続きを取得するときのページトークン

    Raises:
        FetchError: API キー未設定・取得失敗の場合
    """
    if not api_key:
        raise FetchError("YouTube API キーが設定されていません")
    if order not in VIDEO_ORDER_OPTIONS:
        order = DEFAULT_VIDEO_ORDER

    params = {
        "part": "snippet",
        "q": (query or "").strip() or DEFAULT_VIDEO_QUERY,
        "type": "video",
        "order": order,
        "maxResults": min(max_results or 10, MAX_VIDEO_PAGE_SIZE),
        "regionCode": "JP",
        "key": api_key,
    }
    if page_token:
        params["pageToken"] = page_token

    try:
        response = requests.get(YOUTUBE_API_URL, params=params, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        data = response.json()
    except requests.RequestException as e:
        raise FetchError(f"YouTube API の呼び出しに失敗: {e}") from e
    except ValueError as e:
        raise FetchError(f"YouTube API のレスポンスが JSON ではありません: {e}") from e

    page = parse_video_response(data)
    logger.info(
        f"YouTube から {len(page.videos)} 件の動画を取得しました "
        f"(query={query!r}, order={order}, 続きあり={page.next_page_token is not None})"
    )
    return page
