"""
RoboDigest - メインエントリポイント

処理の流れ:
  1. 環境変数ロード
  2. ブックマーク読み込み（旧形式からの移行を含む）
  3. 論文 / 動画の取得（--pages で「もっと見る」を繰り返す）
  4. --bookmark で指定したアイテムのブックマーク切り替え
  5. --summarize で先頭 N 件を並行してAI要約
  6. 一覧をコンソールに出力

使い方:
  python -m robodigest.main                          # 論文タブ（新着順）
  python -m robodigest.main --tab youtube --pages 2  # 動画2ページ分
  python -m robodigest.main --query SLAM --summarize 3
  python -m robodigest.main --saved                  # お気に入りのみ
"""

import argparse
import asyncio
import functools
import sys
import traceback
from typing import Optional

from .config import Settings, load_settings
from .dashboard import Dashboard
from .feed_sources import (
    DEFAULT_PAPER_SORT,
    DEFAULT_VIDEO_ORDER,
    PAPER_SORT_OPTIONS,
    VIDEO_ORDER_OPTIONS,
    fetch_papers,
    fetch_videos,
)
from .feed_cache import FeedStatus
from .models import ContentItem, ItemKind, Tab
from .storage import JsonFileStore
from .summarizer import Summarizer
from .utils import get_logger, truncate
from .view import FeedView

logger = get_logger(__name__)


def build_dashboard(settings: Settings, store_file: Optional[str] = None) -> Dashboard:
    """設定から Dashboard を組み立てる"""
    summarizer = Summarizer(api_key=settings.anthropic_api_key, model=settings.summary_model)
    return Dashboard(
        store=JsonFileStore(store_file or settings.store_file),
        paper_source=functools.partial(fetch_papers, max_results=settings.page_size),
        video_source=functools.partial(
            fetch_videos, settings.youtube_api_key, max_results=settings.page_size,
        ),
        summarizer=summarizer.summarize,
    )


def _find_item(dashboard: Dashboard, item_id: str):
    feed = dashboard.state.feed
    for item in (*feed.papers, *feed.videos):
        if item.id == item_id:
            return item
    for entry in dashboard.state.bookmarks:
        if entry.id == item_id:
            return entry.item
    return None


async def run(
    dashboard: Dashboard,
    tab: Tab = Tab.PAPERS,
    query: str = "",
    paper_sort: str = DEFAULT_PAPER_SORT,
    video_order: str = DEFAULT_VIDEO_ORDER,
    pages: int = 1,
    summarize: int = 0,
    bookmark_ids: tuple[str, ...] = (),
    saved_only: bool = False,
) -> FeedView:
    """CLI 1回分の操作を Dashboard に対して実行し、最終的な表示内容を返す"""
    dashboard.start()
    dashboard.set_tab(tab)
    dashboard.set_filters(query=query, paper_sort=paper_sort, video_order=video_order)

    if not saved_only:
        if tab is Tab.PAPERS:
            await dashboard.load_papers()
        else:
            await dashboard.load_videos()
            for _ in range(max(pages, 1) - 1):
                if not await dashboard.load_more_videos():
                    break

    for item_id in bookmark_ids:
        item = _find_item(dashboard, item_id)
        if item is None:
            logger.warning(f"ブックマーク対象のアイテムが見つかりません: {item_id}")
            continue
        added = dashboard.toggle_bookmark(item)
        logger.info(f"{'ブックマークに追加' if added else 'ブックマークを解除'}: {item_id}")

    if saved_only:
        dashboard.toggle_saved_only()

    if summarize > 0:
        targets = [
            entry.item for entry in dashboard.view().items
            if entry.item.enrichment is None
        ][:summarize]
        logger.info(f"{len(targets)} 件をAI要約します")
        await asyncio.gather(*(dashboard.summarize(item) for item in targets))

    return dashboard.view()


def _print_item(entry: ContentItem, bookmarked: bool) -> None:
    item = entry.item
    star = "★" if bookmarked else "☆"
    if entry.type is ItemKind.PAPER:
        meta = f"[論文] {item.published[:10]}"
    elif entry.type is ItemKind.VIDEO:
        meta = f"[動画] {item.published_at[:10]} {item.channel_title}"
    else:
        raise ValueError(f"未知のアイテム種別です: {entry.type}")

    if item.enrichment:
        print(f"\n{star} {meta} [{item.enrichment.category}]")
        print(f"  {item.enrichment.title_ja}")
        for point in item.enrichment.points:
            print(f"    • {point}")
    else:
        print(f"\n{star} {meta}")
        print(f"  {item.title}")
        print(f"    {truncate(item.body, 160)}")
    print(f"  {item.link}")


def print_view(dashboard: Dashboard, view: FeedView) -> None:
    """表示内容をコンソールに出力する"""
    state = dashboard.state
    title = "お気に入り" if state.show_saved_only else (
        "arXiv 論文" if state.active_tab is Tab.PAPERS else "YouTube 動画"
    )
    print("\n" + "=" * 60)
    print(f"🤖 RoboDigest - {title}" + (f' for "{state.query}"' if state.query else ""))
    print("=" * 60)

    if view.status is FeedStatus.ERROR:
        print(view.error)
    elif not view.items:
        print("お気に入りはまだありません。" if state.show_saved_only else "No items found.")
    for entry in view.items:
        _print_item(entry, dashboard.is_bookmarked(entry.id))

    if view.has_more:
        print("\n（続きあり: --pages を増やすと追加で取得します）")
    for notification in dashboard.dismiss_notifications():
        print(f"\n⚠ {notification.message} (id={notification.item_id})")
    print("=" * 60)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="RoboDigest - Robotics Research Dashboard")
    parser.add_argument(
        "--tab",
        choices=[t.value for t in Tab],
        default=Tab.PAPERS.value,
        help="表示するタブ (default: papers)",
    )
    parser.add_argument("--query", default="", help="検索キーワード（省略時は既定のクエリ）")
    parser.add_argument(
        "--paper-sort",
        choices=PAPER_SORT_OPTIONS,
        default=DEFAULT_PAPER_SORT,
        help=f"論文の並び順 (default: {DEFAULT_PAPER_SORT})",
    )
    parser.add_argument(
        "--video-order",
        choices=VIDEO_ORDER_OPTIONS,
        default=DEFAULT_VIDEO_ORDER,
        help=f"動画の並び順 (default: {DEFAULT_VIDEO_ORDER})",
    )
    parser.add_argument("--pages", type=int, default=1, help="取得する動画のページ数")
    parser.add_argument("--summarize", type=int, default=0, help="先頭から N 件をAI要約する")
    parser.add_argument(
        "--bookmark",
        action="append",
        default=[],
        metavar="ID",
        help="指定IDのブックマークを切り替える（複数指定可）",
    )
    parser.add_argument("--saved", action="store_true", help="お気に入りのみ表示")
    parser.add_argument("--store", default=None, help="保存ファイルのパス")
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
        tab = Tab(args.tab)
        if tab is Tab.YOUTUBE and not args.saved:
            settings.require_youtube_key()

        dashboard = build_dashboard(settings, args.store)
        view = asyncio.run(run(
            dashboard,
            tab=tab,
            query=args.query,
            paper_sort=args.paper_sort,
            video_order=args.video_order,
            pages=args.pages,
            summarize=args.summarize,
            bookmark_ids=tuple(args.bookmark),
            saved_only=args.saved,
        ))
        print_view(dashboard, view)

    except EnvironmentError as e:
        logger.error(str(e))
        return 1

    except Exception:
        logger.error(f"予期しないエラーが発生しました:\n{traceback.format_exc()}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
