"""
共通ユーティリティ: ロギング・テキスト整形
"""

import logging
import re


def get_logger(name: str) -> logging.Logger:
    """標準フォーマットのロガーを返す"""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger(name)


def collapse_newlines(text: str) -> str:
    """改行をスペースに置き換え、前後の空白を除去する"""
    return re.sub(r"\s*\n\s*", " ", text or "").strip()


def truncate(text: str, max_len: int = 200) -> str:
    """テキストを指定文字数に切り詰める"""
    if len(text) <= max_len:
        return text
    return text[:max_len - 1] + "…"
