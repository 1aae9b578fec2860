"""
ブックマーク（お気に入り）の読み込み・保存・マイグレーションを行うモジュール。

ブックマークは ContentItem のタプルとして扱い、変更はすべて
「前のスナップショットから新しいタプルを返す」純粋関数で行う。

保存キー:
  - BOOKMARKS_KEY        : 現行形式（type 判別子付き、論文と動画が混在）
  - LEGACY_BOOKMARKS_KEY : 旧形式（type なしの論文のみの配列）
"""

import json
from typing import Iterable, Optional

from .models import ContentItem, Enrichment, Item, ItemKind
from .storage import KeyValueStore
from .utils import get_logger

logger = get_logger(__name__)

BOOKMARKS_KEY = "robodigest-bookmarks"
LEGACY_BOOKMARKS_KEY = "robodigest-favorites"

Bookmarks = tuple[ContentItem, ...]


def _parse_entries(raw: Optional[str], default_kind: Optional[ItemKind] = None) -> Optional[Bookmarks]:
    """
    保存済み JSON 文字列を ContentItem のタプルに変換する。
    形式が不正な場合は None を返す（1件でも不正なら全体を不正とみなす）。
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        return None

    if not isinstance(data, list):
        return None

    entries: list[ContentItem] = []
    for element in data:
        if not isinstance(element, dict) or not element.get("id"):
            return None
        if default_kind is not None:
            element = {**element, "type": default_kind.value}
        try:
            entries.append(ContentItem.from_dict(element))
        except (KeyError, ValueError):
            return None
    return tuple(entries)


def _clear_key(store: KeyValueStore, key: str) -> None:
    """キーを削除する。書き込みに失敗してもログに残すだけで例外は送出しない"""
    try:
        store.remove(key)
    except Exception as e:
        logger.error(f"保存済みブックマークの削除に失敗しました (key={key}): {e}")


def _read_key(store: KeyValueStore, key: str, default_kind: Optional[ItemKind] = None) -> Bookmarks:
    raw = store.get(key)
    if raw is None:
        return ()
    entries = _parse_entries(raw, default_kind)
    if entries is None:
        logger.warning(f"保存済みブックマークの形式が不正なため破棄します (key={key})")
        _clear_key(store, key)
        return ()
    return entries


def load(store: KeyValueStore) -> Bookmarks:
    """
    現行形式のブックマークを読み込む。

    キーがなければ空。形式が不正ならキーを削除して空を返す（例外は送出しない）。
    """
    return _read_key(store, BOOKMARKS_KEY)


def load_legacy(store: KeyValueStore) -> Bookmarks:
    """
    旧形式（論文のみ・type なし）のブックマークを読み込み、type="paper" を付与する。
    読み込み後は旧キーを削除するため、2回目以降は常に空になる。
    """
    if store.get(LEGACY_BOOKMARKS_KEY) is None:
        return ()
    entries = _read_key(store, LEGACY_BOOKMARKS_KEY, default_kind=ItemKind.PAPER)
    _clear_key(store, LEGACY_BOOKMARKS_KEY)
    return entries


def _dedupe(entries: Iterable[ContentItem]) -> list[ContentItem]:
    # ID基準、最初のものを残す
    seen_ids: set[str] = set()
    unique: list[ContentItem] = []
    for entry in entries:
        if entry.id not in seen_ids:
            seen_ids.add(entry.id)
            unique.append(entry)
    return unique


def merge(current: Iterable[ContentItem], incoming: Iterable[ContentItem]) -> Bookmarks:
    """
    2つのブックマーク列を ID 基準で統合する。

    同じ ID がある場合は current 側が優先される（要約済みの可能性があるため）。
    順序は current → incoming の新規分。
    """
    return tuple(_dedupe([*current, *incoming]))


def is_bookmarked(bookmarks: Bookmarks, item_id: str) -> bool:
    return any(entry.id == item_id for entry in bookmarks)


def toggle(bookmarks: Bookmarks, item: Item) -> Bookmarks:
    """ID があれば削除、なければ type を付けて末尾に追加する"""
    if is_bookmarked(bookmarks, item.id):
        return tuple(entry for entry in bookmarks if entry.id != item.id)
    return (*bookmarks, ContentItem.tag(item))


def apply_enrichment(bookmarks: Bookmarks, item_id: str, enrichment: Enrichment) -> Bookmarks:
    """ID が一致するエントリに要約を反映する（type は維持、該当なしなら変更なし）"""
    if not is_bookmarked(bookmarks, item_id):
        return bookmarks
    return tuple(
        entry.with_enrichment(enrichment) if entry.id == item_id else entry
        for entry in bookmarks
    )


def save(store: KeyValueStore, bookmarks: Bookmarks) -> bool:
    """
    ブックマーク全体を上書き保存する。

    書き込みに失敗してもログに残すだけで例外は送出しない（リトライもしない）。

    Returns:
        bool: 保存に成功したら True
    """
    payload = json.dumps([entry.to_dict() for entry in bookmarks], ensure_ascii=False)
    try:
        store.set(BOOKMARKS_KEY, payload)
    except Exception as e:
        logger.error(f"ブックマークの保存に失敗しました: {e}")
        return False
    return True


def migrate_legacy(store: KeyValueStore) -> Bookmarks:
    """
    起動時に1回だけ実行する旧形式からの移行。

    旧キーの内容を現行形式に統合して保存し、統合後のブックマークを返す。
    旧キーがなければ現行形式をそのまま返す。
    """
    current = load(store)
    legacy = load_legacy(store)
    if not legacy:
        return current

    merged = merge(current, legacy)
    logger.info(
        f"旧形式のブックマーク {len(legacy)} 件を移行しました（統合後 {len(merged)} 件）"
    )
    save(store, merged)
    return merged
