"""
画面に表示するアイテム列を決める純粋関数。
"""

from dataclasses import dataclass
from typing import Optional

from .bookmark_store import Bookmarks
from .feed_cache import FeedCache, FeedStatus
from .models import ContentItem, Tab


@dataclass(frozen=True)
class FeedView:
    items: tuple[ContentItem, ...]
    has_more: bool = False
    # お気に入り表示のときは None
    status: Optional[FeedStatus] = None
    error: str = ""


def select(
    active_tab: Tab,
    show_saved_only: bool,
    feed: FeedCache,
    bookmarks: Bookmarks,
) -> FeedView:
    """
    表示するアイテム列を返す。

    - お気に入りのみ: ブックマークを登録順のまま（論文・動画混在）
    - 論文タブ: 取得順のまま
    - YouTube タブ: 取得順のまま + 「もっと見る」を出すかどうか
    """
    if show_saved_only:
        return FeedView(items=tuple(bookmarks))

    if active_tab is Tab.PAPERS:
        return FeedView(
            items=tuple(ContentItem.tag(p) for p in feed.papers),
            status=feed.paper_status,
            error=feed.paper_error,
        )
    elif active_tab is Tab.YOUTUBE:
        return FeedView(
            items=tuple(ContentItem.tag(v) for v in feed.videos),
            has_more=feed.has_more_videos,
            status=feed.video_status,
            error=feed.video_error,
        )
    raise ValueError(f"未知のタブです: {active_tab}")