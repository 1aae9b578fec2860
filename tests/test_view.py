"""
view モジュールのユニットテスト
"""

from robodigest.bookmark_store import is_bookmarked
from robodigest.feed_cache import FeedCache, FeedStatus
from robodigest.models import ContentItem, ItemKind, Paper, Tab, Video
from robodigest.view import select


def make_feed() -> FeedCache:
    cache = FeedCache().set_papers([Paper(id="p2", title="B"), Paper(id="p1", title="A")])
    return cache.set_videos([Video(id="v1", title="V")], replace_existing=True, next_page_token="NEXT")


class TestSelect:
    def test_saved_only_returns_bookmarks_in_insertion_order(self):
        bookmarks = (
            ContentItem.tag(Video(id="v9", title="old video")),
            ContentItem.tag(Paper(id="p9", title="old paper")),
        )
        for tab in Tab:
            for feed in (FeedCache(), make_feed()):
                view = select(tab, True, feed, bookmarks)
                assert view.items == bookmarks
                assert view.has_more is False

    def test_papers_tab_keeps_server_order(self):
        view = select(Tab.PAPERS, False, make_feed(), ())
        assert [entry.id for entry in view.items] == ["p2", "p1"]
        assert all(entry.type is ItemKind.PAPER for entry in view.items)
        assert view.has_more is False
        assert view.status is FeedStatus.READY

    def test_youtube_tab_reports_more_pages(self):
        view = select(Tab.YOUTUBE, False, make_feed(), ())
        assert [entry.id for entry in view.items] == ["v1"]
        assert view.has_more is True

    def test_youtube_tab_without_token(self):
        feed = FeedCache().set_videos([Video(id="v1", title="V")], replace_existing=True)
        assert select(Tab.YOUTUBE, False, feed, ()).has_more is False

    def test_error_state_is_exposed(self):
        feed = FeedCache().mark_failed(ItemKind.VIDEO, "動画の取得に失敗しました。")
        view = select(Tab.YOUTUBE, False, feed, ())
        assert view.items == ()
        assert view.status is FeedStatus.ERROR
        assert view.error == "動画の取得に失敗しました。"


class TestIsBookmarked:
    def test_membership_by_id(self):
        bookmarks = (ContentItem.tag(Paper(id="p1", title="A")),)
        assert is_bookmarked(bookmarks, "p1")
        assert not is_bookmarked(bookmarks, "p2")
