"""
取得済みフィード（論文・動画）のキャッシュ。

FeedCache は不変のスナップショットで、各メソッドは新しい FeedCache を返す。
論文は検索ごとに全件置き換え、動画は1ページ目で置き換え・2ページ目以降は末尾に追加する。
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Optional

from .models import Enrichment, ItemKind, Paper, Video


class FeedStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    EMPTY = "empty"  # 取得成功・該当なし
    ERROR = "error"  # 取得失敗


@dataclass(frozen=True)
class FeedCache:
    papers: tuple[Paper, ...] = ()
    videos: tuple[Video, ...] = ()
    next_page_token: Optional[str] = None
    total_results: int = 0
    paper_status: FeedStatus = FeedStatus.IDLE
    video_status: FeedStatus = FeedStatus.IDLE
    paper_error: str = ""
    video_error: str = ""

    @property
    def has_more_videos(self) -> bool:
        return self.next_page_token is not None

    def status(self, kind: ItemKind) -> FeedStatus:
        if kind is ItemKind.PAPER:
            return self.paper_status
        elif kind is ItemKind.VIDEO:
            return self.video_status
        raise ValueError(f"未知のアイテム種別です: {kind}")

    def error(self, kind: ItemKind) -> str:
        if kind is ItemKind.PAPER:
            return self.paper_error
        elif kind is ItemKind.VIDEO:
            return self.video_error
        raise ValueError(f"未知のアイテム種別です: {kind}")

    def set_papers(self, items: Iterable[Paper]) -> "FeedCache":
        papers = tuple(items)
        return replace(
            self,
            papers=papers,
            paper_status=FeedStatus.READY if papers else FeedStatus.EMPTY,
            paper_error="",
        )

    def set_videos(
        self,
        items: Iterable[Video],
        replace_existing: bool,
        next_page_token: Optional[str] = None,
        total_results: int = 0,
    ) -> "FeedCache":
        """
        動画一覧を更新する。

        Args:
            items: 取得した動画
            replace_existing: True なら置き換え、False なら既存の後ろに追加（重複除去なし）
            next_page_token: 次ページのトークン（None なら続きなし）
            total_results: API が返した総件数
        """
        new_videos = tuple(items)
        videos = new_videos if replace_existing else (*self.videos, *new_videos)
        return replace(
            self,
            videos=videos,
            next_page_token=next_page_token or None,
            total_results=total_results,
            video_status=FeedStatus.READY if videos else FeedStatus.EMPTY,
            video_error="",
        )

    def mark_loading(self, kind: ItemKind) -> "FeedCache":
        if kind is ItemKind.PAPER:
            return replace(self, paper_status=FeedStatus.LOADING, paper_error="")
        elif kind is ItemKind.VIDEO:
            return replace(self, video_status=FeedStatus.LOADING, video_error="")
        raise ValueError(f"未知のアイテム種別です: {kind}")

    def mark_failed(self, kind: ItemKind, message: str) -> "FeedCache":
        """取得失敗を記録する。既存の一覧はそのまま残す"""
        if kind is ItemKind.PAPER:
            return replace(self, paper_status=FeedStatus.ERROR, paper_error=message)
        elif kind is ItemKind.VIDEO:
            return replace(self, video_status=FeedStatus.ERROR, video_error=message)
        raise ValueError(f"未知のアイテム種別です: {kind}")

    def update_item(self, kind: ItemKind, item_id: str, enrichment: Enrichment) -> "FeedCache":
        """指定コレクション内の ID が一致するアイテムに要約を反映する（該当なしなら変更なし）"""
        if kind is ItemKind.PAPER:
            if not any(p.id == item_id for p in self.papers):
                return self
            return replace(self, papers=tuple(
                p.with_enrichment(enrichment) if p.id == item_id else p
                for p in self.papers
            ))
        elif kind is ItemKind.VIDEO:
            if not any(v.id == item_id for v in self.videos):
                return self
            return replace(self, videos=tuple(
                v.with_enrichment(enrichment) if v.id == item_id else v
                for v in self.videos
            ))
        raise ValueError(f"未知のアイテム種別です: {kind}")
