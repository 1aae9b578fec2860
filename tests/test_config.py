"""
config モジュールのユニットテスト
"""

import pytest

from robodigest.config import Settings, load_settings

ENV_KEYS = [
    "ANTHROPIC_API_KEY",
    "YOUTUBE_API_KEY",
    "ROBODIGEST_STORE_FILE",
    "ROBODIGEST_PAGE_SIZE",
    "ROBODIGEST_SUMMARY_MODEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # load_dotenv が書き込んだ値もテスト後に戻す
    for key in ENV_KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)


class TestLoadSettings:
    def test_defaults(self, tmp_path):
        settings = load_settings(str(tmp_path / "missing.env"))
        assert settings == Settings()

    def test_reads_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "ANTHROPIC_API_KEY=sk-test\nYOUTUBE_API_KEY=yt-test\nROBODIGEST_PAGE_SIZE=25\n",
            encoding="utf-8",
        )
        settings = load_settings(str(env_file))
        assert settings.anthropic_api_key == "sk-test"
        assert settings.youtube_api_key == "yt-test"
        assert settings.page_size == 25

    def test_invalid_page_size_falls_back(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ROBODIGEST_PAGE_SIZE", "many")
        assert load_settings(str(tmp_path / "missing.env")).page_size == 10


class TestRequireYoutubeKey:
    def test_missing_key_raises(self):
        with pytest.raises(EnvironmentError):
            Settings().require_youtube_key()

    def test_returns_key(self):
        assert Settings(youtube_api_key="yt").require_youtube_key() == "yt"
