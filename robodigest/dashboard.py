"""
ダッシュボードの状態管理とAI要約の反映処理。

状態 (DashboardState) は不変のスナップショットで、変更はすべて
Dashboard._commit() に「前の状態 -> 新しい状態」の関数を渡して行う。
ネットワーク呼び出し（論文取得・動画取得・要約）はワーカースレッドで実行し、
結果の反映はイベントループ上の _commit() だけが行う。

要約の流れ:
  1. EnrichmentTracker.begin() で二重実行を防止
  2. 要約器に (title, body, kind) を渡す
  3. 成功したらフィードとブックマークの両方に同じ要約を反映して保存
  4. 失敗したら通知を追加（状態は変更しない）
  5. 成否にかかわらず EnrichmentTracker.end()
"""

import asyncio
from dataclasses import dataclass, field, replace
from typing import Callable, Optional

from . import bookmark_store
from .bookmark_store import Bookmarks
from .enrichment_tracker import EnrichmentTracker
from .feed_cache import FeedCache, FeedStatus
from .feed_sources import DEFAULT_PAPER_SORT, DEFAULT_VIDEO_ORDER
from .models import Enrichment, Item, ItemKind, Notification, Paper, Tab, VideoPage
from .storage import KeyValueStore
from .utils import get_logger
from .view import FeedView, select

logger = get_logger(__name__)

PAPER_FETCH_ERROR = "論文の取得に失敗しました。"
VIDEO_FETCH_ERROR = "動画の取得に失敗しました。"
SUMMARY_ERROR = "要約の生成に失敗しました"

PaperSource = Callable[..., list[Paper]]
VideoSource = Callable[..., VideoPage]
SummarizeFn = Callable[[str, str, ItemKind], Enrichment]
Transition = Callable[["DashboardState"], "DashboardState"]


@dataclass(frozen=True)
class DashboardState:
    feed: FeedCache = field(default_factory=FeedCache)
    bookmarks: Bookmarks = ()
    active_tab: Tab = Tab.PAPERS
    show_saved_only: bool = False
    query: str = ""
    paper_sort: str = DEFAULT_PAPER_SORT
    video_order: str = DEFAULT_VIDEO_ORDER
    notifications: tuple[Notification, ...] = ()


def reconcile(state: DashboardState, kind: ItemKind, item_id: str, enrichment: Enrichment) -> DashboardState:
    """要約結果をフィードとブックマークの両方に反映した新しい状態を返す"""
    return replace(
        state,
        feed=state.feed.update_item(kind, item_id, enrichment),
        bookmarks=bookmark_store.apply_enrichment(state.bookmarks, item_id, enrichment),
    )


class Dashboard:
    """
    フィード・ブックマーク・要約の状態を1か所で保持するコンテナ。

    Args:
        store: ブックマークの保存先
        paper_source: fetch_papers(query=..., sort_by=...) 互換の関数
        video_source: fetch_videos(query=..., order=..., page_token=...) 互換の関数
        summarizer: (title, body, kind) -> Enrichment
    """

    def __init__(
        self,
        store: KeyValueStore,
        paper_source: PaperSource,
        video_source: VideoSource,
        summarizer: SummarizeFn,
        state: Optional[DashboardState] = None,
    ):
        self.store = store
        self.paper_source = paper_source
        self.video_source = video_source
        self.summarizer = summarizer
        self.tracker = EnrichmentTracker()
        self.state = state or DashboardState()
        # 検索条件が変わるたびに増やし、古いリクエストの結果を捨てる
        self._generation: dict[ItemKind, int] = {ItemKind.PAPER: 0, ItemKind.VIDEO: 0}

    # ── 状態更新 ──────────────────────────────────────

    def _commit(self, transition: Transition, persist: bool = True) -> DashboardState:
        """状態更新の唯一の入口。ブックマークが変わった場合は保存する"""
        previous = self.state
        self.state = transition(previous)
        if persist and self.state.bookmarks != previous.bookmarks:
            bookmark_store.save(self.store, self.state.bookmarks)
        return self.state

    def _next_generation(self, kind: ItemKind) -> int:
        self._generation[kind] += 1
        return self._generation[kind]

    def _is_current(self, kind: ItemKind, generation: int) -> bool:
        return self._generation[kind] == generation

    def start(self) -> Bookmarks:
        """起動時処理: 旧形式ブックマークを移行して読み込む"""
        bookmarks = bookmark_store.migrate_legacy(self.store)
        self._commit(lambda s: replace(s, bookmarks=bookmarks), persist=False)
        logger.info(f"ブックマーク {len(bookmarks)} 件を読み込みました")
        return bookmarks

    # ── フィード取得 ──────────────────────────────────

    async def load_papers(self) -> bool:
        """現在の検索条件で論文を取得し、一覧を置き換える"""
        generation = self._next_generation(ItemKind.PAPER)
        query, sort_by = self.state.query, self.state.paper_sort
        self._commit(lambda s: replace(s, feed=s.feed.mark_loading(ItemKind.PAPER)))

        try:
            papers = await asyncio.to_thread(self.paper_source, query=query or None, sort_by=sort_by)
        except Exception as e:
            logger.error(f"論文の取得に失敗しました: {e}")
            if self._is_current(ItemKind.PAPER, generation):
                self._commit(lambda s: replace(s, feed=s.feed.mark_failed(ItemKind.PAPER, PAPER_FETCH_ERROR)))
            return False

        if not self._is_current(ItemKind.PAPER, generation):
            logger.info(f"古い検索条件の論文取得結果を破棄します (query={query!r})")
            return False

        self._commit(lambda s: replace(s, feed=s.feed.set_papers(papers)))
        return True

    async def load_videos(self, more: bool = False) -> bool:
        """
        動画を取得する。

        Args:
            more: True なら次ページを取得して末尾に追加する（続きがない・取得中なら何もしない）
        """
        feed = self.state.feed
        if more:
            if not feed.has_more_videos or feed.video_status is FeedStatus.LOADING:
                return False
            generation = self._generation[ItemKind.VIDEO]
            page_token = feed.next_page_token
        else:
            generation = self._next_generation(ItemKind.VIDEO)
            page_token = None

        query, order = self.state.query, self.state.video_order
        self._commit(lambda s: replace(s, feed=s.feed.mark_loading(ItemKind.VIDEO)))

        try:
            page = await asyncio.to_thread(
                self.video_source, query=query or None, order=order, page_token=page_token,
            )
        except Exception as e:
            logger.error(f"動画の取得に失敗しました: {e}")
            if self._is_current(ItemKind.VIDEO, generation):
                self._commit(lambda s: replace(s, feed=s.feed.mark_failed(ItemKind.VIDEO, VIDEO_FETCH_ERROR)))
            return False

        if not self._is_current(ItemKind.VIDEO, generation):
            logger.info(f"古い検索条件の動画取得結果を破棄します (query={query!r})")
            return False

        self._commit(lambda s: replace(s, feed=s.feed.set_videos(
            page.videos,
            replace_existing=not more,
            next_page_token=page.next_page_token,
            total_results=page.total_results,
        )))
        return True

    async def load_more_videos(self) -> bool:
        return await self.load_videos(more=True)

    def set_filters(
        self,
        query: Optional[str] = None,
        paper_sort: Optional[str] = None,
        video_order: Optional[str] = None,
    ) -> None:
        """検索条件だけを変更する（再取得はしない）。None の項目は変更しない"""
        self._commit(lambda s: replace(
            s,
            query=s.query if query is None else query.strip(),
            paper_sort=paper_sort or s.paper_sort,
            video_order=video_order or s.video_order,
        ))

    async def search(self, keyword: str) -> None:
        """キーワードを変更し、論文と動画を取り直す"""
        self.set_filters(query=keyword)
        await asyncio.gather(self.load_papers(), self.load_videos())

    async def set_paper_sort(self, sort_by: str) -> bool:
        self.set_filters(paper_sort=sort_by)
        return await self.load_papers()

    async def set_video_order(self, order: str) -> bool:
        self.set_filters(video_order=order)
        return await self.load_videos()

    # ── ユーザー操作 ──────────────────────────────────

    def set_tab(self, tab: Tab) -> None:
        self._commit(lambda s: replace(s, active_tab=tab))

    def toggle_saved_only(self) -> bool:
        self._commit(lambda s: replace(s, show_saved_only=not s.show_saved_only))
        return self.state.show_saved_only

    def toggle_bookmark(self, item: Item) -> bool:
        """
        ブックマークの追加・解除を切り替える。

        Returns:
            bool: 切り替え後にブックマークされていれば True
        """
        self._commit(lambda s: replace(s, bookmarks=bookmark_store.toggle(s.bookmarks, item)))
        return self.is_bookmarked(item.id)

    def is_bookmarked(self, item_id: str) -> bool:
        return bookmark_store.is_bookmarked(self.state.bookmarks, item_id)

    def is_summarizing(self, item_id: str) -> bool:
        return self.tracker.is_active(item_id)

    def dismiss_notifications(self) -> tuple[Notification, ...]:
        notifications = self.state.notifications
        self._commit(lambda s: replace(s, notifications=()))
        return notifications

    async def summarize(self, item: Item) -> bool:
        """
        アイテムをAI要約し、フィードとブックマークの両方に反映する。

        Returns:
            bool: 要約を反映できたら True（処理中で受け付けなかった・失敗した場合は False）
        """
        kind = item.kind
        if not self.tracker.begin(item.id):
            logger.info(f"要約処理中のためスキップします (id={item.id})")
            return False

        try:
            enrichment = await asyncio.to_thread(self.summarizer, item.title, item.body, kind)
            if not isinstance(enrichment, Enrichment):
                raise TypeError(f"要約器の戻り値が不正です: {type(enrichment).__name__}")
            self._commit(lambda s: reconcile(s, kind, item.id, enrichment))
        except Exception as e:
            logger.warning(f"要約生成失敗 (id={item.id}): {e}")
            notification = Notification(item_id=item.id, message=SUMMARY_ERROR)
            self._commit(lambda s: replace(s, notifications=(*s.notifications, notification)))
            return False
        finally:
            self.tracker.end(item.id)
        return True

    # ── 表示 ──────────────────────────────────────────

    def view(self) -> FeedView:
        state = self.state
        return select(state.active_tab, state.show_saved_only, state.feed, state.bookmarks)
