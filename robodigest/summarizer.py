"""
Claude API を使って論文・動画の日本語ダイジェストを生成するモジュール。

出力は常に次の形:
  {"title_ja": "日本語タイトル", "points": ["課題", "手法", "結果"], "category": "SLAM"}
"""

import json
import re
from typing import Optional

from anthropic import Anthropic

from .models import Enrichment, ItemKind
from .utils import get_logger

logger = get_logger(__name__)

# 要約生成モデル（軽量）
SUMMARIZE_MODEL = "claude-haiku-4-5"

PAPER_PROMPT = """あなたはロボティクスの専門家です。以下の学術論文をダッシュボード用に要約してください。

論文タイトル: {title}
論文アブストラクト: {body}

JSONオブジェクトのみで返してください（前後の説明・マークダウン記号は不要）:
{{
  "title_ja": "日本語タイトル（30文字以内、キャッチーに）",
  "points": ["ポイント1（課題）", "ポイント2（手法）", "ポイント3（結果）"],
  "category": "技術タグ（例: SLAM, Manipulation, AGV）英語のみ"
}}

points は日本語で書くこと。category は短く正確に。"""

VIDEO_PROMPT = """あなたはロボティクスの専門家です。以下のYouTube動画をダッシュボード用に要約してください。

動画タイトル: {title}
動画の説明文: {body}

JSONオブジェクトのみで返してください（前後の説明・マークダウン記号は不要）:
{{
  "title_ja": "日本語タイトル（30文字以内、キャッチーに）",
  "points": ["ポイント1（テーマ）", "ポイント2（内容）", "ポイント3（見どころ）"],
  "category": "技術タグ（例: ROS 2, Humanoid, Simulation）英語のみ"
}}

points は日本語で書くこと。category は短く正確に。"""

# API キー未設定時に返すダイジェスト
CONFIG_ERROR_POINTS = (
    "API Key not configured",
    "Please check .env",
    "Summary unavailable",
)


class SummaryError(Exception):
    """要約の生成に失敗した（API エラー・不正なレスポンス）"""


def build_prompt(title: str, body: str, kind: ItemKind) -> str:
    if kind is ItemKind.PAPER:
        template = PAPER_PROMPT
    elif kind is ItemKind.VIDEO:
        template = VIDEO_PROMPT
    else:
        raise ValueError(f"未知のアイテム種別です: {kind}")
    return template.format(title=title, body=body[:3000])


def parse_summary(result_text: str) -> Enrichment:
    """
    モデルの出力テキストから Enrichment を取り出す。

    Raises:
        SummaryError: JSON として読めない、または必要なキーがない場合
    """
    text = result_text.strip()

    # ```json ... ``` ブロックの除去
    if "```" in text:
        text = re.sub(r"```(?:json)?", "", text).strip().rstrip("`").strip()

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        # フォールバック: オブジェクト部分だけ抽出
        match = re.search(r"\{.*\}", text, re.DOTALL)
        if not match:
            raise SummaryError(f"要約のJSONパースに失敗しました: {text[:100]}")
        try:
            data = json.loads(match.group())
        except json.JSONDecodeError as e:
            raise SummaryError(f"要約のJSONパースに失敗しました: {e}") from e

    if not isinstance(data, dict):
        raise SummaryError("要約の形式が不正です（オブジェクトではありません）")

    title_ja = data.get("title_ja")
    points = data.get("points")
    if not isinstance(title_ja, str) or not title_ja.strip():
        raise SummaryError("要約に title_ja がありません")
    if not isinstance(points, list):
        raise SummaryError("要約に points がありません")

    return Enrichment(
        title_ja=title_ja.strip(),
        points=tuple(str(p).strip() for p in points),
        category=str(data.get("category") or "").strip(),
    )


class Summarizer:
    """
    Anthropic Messages API を呼び出す要約器。

    api_key が空の場合は API を呼ばずに設定エラー用のダイジェストを返す。
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = SUMMARIZE_MODEL,
        client: Optional[Anthropic] = None,
    ):
        self.model = model
        self.client = client
        if self.client is None and api_key:
            self.client = Anthropic(api_key=api_key, max_retries=0)

    def summarize(self, title: str, body: str, kind: ItemKind) -> Enrichment:
        """
        1件のアイテムを要約する。

        Raises:
            SummaryError: 生成結果が不正な場合
            anthropic.APIError: API 呼び出しに失敗した場合
        """
        if self.client is None:
            logger.warning("ANTHROPIC_API_KEY が未設定のため要約を生成できません")
            return Enrichment(
                title_ja=title,
                points=CONFIG_ERROR_POINTS,
                category="Config Error",
            )

        response = self.client.messages.create(
            model=self.model,
            max_tokens=1024,
            messages=[{"role": "user", "content": build_prompt(title, body, kind)}],
        )
        if not response.content:
            raise SummaryError("要約のレスポンスが空です")

        enrichment = parse_summary(response.content[0].text)
        logger.info(
            f"要約生成完了: {enrichment.title_ja} [{enrichment.category}] | "
            f"トークン: input={response.usage.input_tokens}, output={response.usage.output_tokens}"
        )
        return enrichment
