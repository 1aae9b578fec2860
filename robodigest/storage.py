"""
キー・バリュー形式の永続化ストア。

ブックマークなど、セッションをまたいで保持する値を文字列として保存する。
JsonFileStore は全キーを1つの JSON ファイルにまとめて書き込む。
"""

import json
import os
from typing import Optional, Protocol

from .utils import get_logger

logger = get_logger(__name__)

DEFAULT_STORE_FILE = "robodigest_store.json"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStore:
    """プロセス内だけで保持するストア（テスト・一時利用向け）"""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """
    1つの JSON ファイル {key: value} を裏に持つストア。

    ファイルが存在しない・壊れている場合は空として扱う。
    書き込み失敗 (OSError) は呼び出し元に送出する。
    """

    def __init__(self, filepath: str = DEFAULT_STORE_FILE):
        self.filepath = filepath

    def _read_all(self) -> dict[str, str]:
        if not os.path.exists(self.filepath):
            return {}
        try:
            with open(self.filepath, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"ストアファイルの読み込みに失敗: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"ストアファイルの形式が不正です: {self.filepath}")
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: dict[str, str]) -> None:
        tmp_path = f"{self.filepath}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, self.filepath)

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)
