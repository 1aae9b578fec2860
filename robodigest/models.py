"""
共通データクラス定義

論文 (Paper) と動画 (Video) の2種類のアイテム、AI要約 (Enrichment)、
ブックマーク用のタグ付きアイテム (ContentItem) を定義する。
保存形式（JSON）は要約フィールドを平坦に持つ:
  {"id", "title", ..., "type", "title_ja", "points", "category"}
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import ClassVar, Optional, Union


class ItemKind(str, Enum):
    """アイテム種別（ブックマークの type 判別子）"""
    PAPER = "paper"
    VIDEO = "video"


class Tab(str, Enum):
    """表示タブ"""
    PAPERS = "papers"
    YOUTUBE = "youtube"


@dataclass(frozen=True)
class Enrichment:
    """AI要約結果。title_ja / points / category は常に1セットで扱う"""
    title_ja: str
    points: tuple[str, ...] = ()
    category: str = ""

    def to_dict(self) -> dict:
        return {
            "title_ja": self.title_ja,
            "points": list(self.points),
            "category": self.category,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Optional["Enrichment"]:
        """
        title_ja があるときだけ Enrichment を返す。
        points / category だけが存在する場合は要約なしとして扱う。
        """
        title_ja = data.get("title_ja")
        if not isinstance(title_ja, str) or not title_ja:
            return None
        points = data.get("points") or []
        if not isinstance(points, (list, tuple)):
            points = []
        category = data.get("category")
        return cls(
            title_ja=title_ja,
            points=tuple(str(p) for p in points),
            category=category if isinstance(category, str) else "",
        )


@dataclass(frozen=True)
class Paper:
    """arXiv 論文"""
    kind: ClassVar[ItemKind] = ItemKind.PAPER

    id: str
    title: str
    summary: str = ""
    published: str = ""
    link: str = ""
    enrichment: Optional[Enrichment] = None

    @property
    def body(self) -> str:
        return self.summary

    def with_enrichment(self, enrichment: Enrichment) -> "Paper":
        return replace(self, enrichment=enrichment)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "title": self.title,
            "summary": self.summary,
            "published": self.published,
            "link": self.link,
        }
        if self.enrichment:
            data.update(self.enrichment.to_dict())
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Paper":
        return cls(
            id=str(data["id"]),
            title=str(data.get("title") or ""),
            summary=str(data.get("summary") or ""),
            published=str(data.get("published") or ""),
            link=str(data.get("link") or data["id"]),
            enrichment=Enrichment.from_dict(data),
        )


@dataclass(frozen=True)
class Video:
    """YouTube 動画"""
    kind: ClassVar[ItemKind] = ItemKind.VIDEO

    id: str
    title: str
    description: str = ""
    thumbnail: str = ""
    channel_title: str = ""
    published_at: str = ""
    link: str = ""
    enrichment: Optional[Enrichment] = None

    @property
    def body(self) -> str:
        return self.description

    def with_enrichment(self, enrichment: Enrichment) -> "Video":
        return replace(self, enrichment=enrichment)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "thumbnail": self.thumbnail,
            "channelTitle": self.channel_title,
            "publishedAt": self.published_at,
            "link": self.link,
        }
        if self.enrichment:
            data.update(self.enrichment.to_dict())
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Video":
        video_id = str(data["id"])
        return cls(
            id=video_id,
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
            thumbnail=str(data.get("thumbnail") or ""),
            channel_title=str(data.get("channelTitle") or ""),
            published_at=str(data.get("publishedAt") or ""),
            link=str(data.get("link") or f"https://www.youtube.com/watch?v={video_id}"),
            enrichment=Enrichment.from_dict(data),
        )


Item = Union[Paper, Video]


@dataclass(frozen=True)
class ContentItem:
    """type 判別子付きのアイテム（ブックマークに保存される形）"""
    type: ItemKind
    item: Item

    @property
    def id(self) -> str:
        return self.item.id

    def with_enrichment(self, enrichment: Enrichment) -> "ContentItem":
        return ContentItem(type=self.type, item=self.item.with_enrichment(enrichment))

    def to_dict(self) -> dict:
        data = self.item.to_dict()
        data["type"] = self.type.value
        return data

    @classmethod
    def tag(cls, item: Item) -> "ContentItem":
        return cls(type=item.kind, item=item)

    @classmethod
    def from_dict(cls, data: dict) -> "ContentItem":
        """
        保存形式の dict を ContentItem に変換する。

        Raises:
            ValueError: type が未知、または id がない場合
        """
        if not data.get("id"):
            raise ValueError(f"id がありません: {str(data)[:100]}")
        kind = ItemKind(data.get("type"))
        if kind is ItemKind.PAPER:
            return cls(type=kind, item=Paper.from_dict(data))
        elif kind is ItemKind.VIDEO:
            return cls(type=kind, item=Video.from_dict(data))
        raise ValueError(f"未知のアイテム種別です: {kind}")


@dataclass(frozen=True)
class VideoPage:
    """YouTube 検索結果の1ページ"""
    videos: list[Video] = field(default_factory=list)
    next_page_token: Optional[str] = None
    total_results: int = 0


@dataclass(frozen=True)
class Notification:
    """画面に表示する一時的な通知"""
    item_id: str
    message: str
