"""
要約処理中のアイテムIDを管理する。

同じアイテムに対する要約リクエストが同時に2つ走らないよう、
begin() が False を返した場合は呼び出し側でリクエストを中止すること。
タイムアウトはないため、完了しないリクエストの ID は解放されない。
"""


class EnrichmentTracker:
    def __init__(self):
        self._active: set[str] = set()

    def begin(self, item_id: str) -> bool:
        """ID を処理中として登録する。すでに処理中なら False"""
        if item_id in self._active:
            return False
        self._active.add(item_id)
        return True

    def end(self, item_id: str) -> None:
        self._active.discard(item_id)

    def is_active(self, item_id: str) -> bool:
        return item_id in self._active

    @property
    def active_ids(self) -> frozenset[str]:
        return frozenset(self._active)
