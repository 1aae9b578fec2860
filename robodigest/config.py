"""
環境変数からの設定読み込み。
.env ファイルがあれば優先的に読み込む（ローカル開発用）。
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .storage import DEFAULT_STORE_FILE
from .summarizer import SUMMARIZE_MODEL
from .utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Settings:
    anthropic_api_key: str = ""
    youtube_api_key: str = ""
    store_file: str = DEFAULT_STORE_FILE
    page_size: int = 10
    summary_model: str = SUMMARIZE_MODEL

    def require_youtube_key(self) -> str:
        if not self.youtube_api_key:
            raise EnvironmentError(
                "YOUTUBE_API_KEY が設定されていません\n"
                ".env.example を参考に .env ファイルを作成してください。"
            )
        return self.youtube_api_key


def _int_env(key: str, default: int) -> int:
    raw = os.environ.get(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"{key} の値が整数ではないため既定値 {default} を使います: {raw}")
        return default


def load_settings(env_file: str = ".env") -> Settings:
    """
    環境変数を読み込んで Settings を返す。
    ANTHROPIC_API_KEY が未設定でも起動はできる（要約は設定エラー表示になる）。
    """
    path = Path(env_file)
    if path.exists():
        load_dotenv(path)
        logger.info(f"{env_file} ファイルを読み込みました")

    settings = Settings(
        anthropic_api_key=os.environ.get("ANTHROPIC_API_KEY", "").strip(),
        youtube_api_key=os.environ.get("YOUTUBE_API_KEY", "").strip(),
        store_file=os.environ.get("ROBODIGEST_STORE_FILE", "").strip() or DEFAULT_STORE_FILE,
        page_size=_int_env("ROBODIGEST_PAGE_SIZE", 10),
        summary_model=os.environ.get("ROBODIGEST_SUMMARY_MODEL", "").strip() or SUMMARIZE_MODEL,
    )
    if not settings.anthropic_api_key:
        logger.warning("ANTHROPIC_API_KEY が設定されていません。AI要約は利用できません")
    return settings
