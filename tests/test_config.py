"""
Smoke tests for config / settings loading.
Run: python -m pytest tests/ -v
"""
from sop_quiz.config import MAX_UPLOAD_BYTES, get_settings, _is_placeholder


class TestIsPlaceholder:
    def test_empty_string_is_placeholder(self):
        assert _is_placeholder("")

    def test_angle_bracket_is_placeholder(self):
        assert _is_placeholder("<your-key-here>")

    def test_your_prefix_is_placeholder(self):
        assert _is_placeholder("your-endpoint")

    def test_literal_PLACEHOLDER_is_placeholder(self):
        assert _is_placeholder("PLACEHOLDER")

    def test_real_value_not_placeholder(self):
        assert not _is_placeholder("https://my-resource.openai.azure.com")

    def test_real_key_not_placeholder(self):
        assert not _is_placeholder("abc123defgh456ijkl789mnop")


class TestSettingsLoading:
    def test_defaults(self, monkeypatch):
        for var in ("QUIZ_TEMPERATURE", "QUIZ_MAX_TOKENS", "QUIZ_PROMPT_CHAR_LIMIT",
                    "QUIZ_MAX_QUESTIONS", "MAX_UPLOAD_BYTES", "MIN_TEXT_CHARS",
                    "OPENAI_MODEL", "LOG_LEVEL"):
            monkeypatch.delenv(var, raising=False)
        s = get_settings()
        assert s.generation.temperature == 0.7
        assert s.generation.max_tokens == 2000
        assert s.generation.prompt_char_limit == 3000
        assert s.generation.max_questions == 20
        assert s.app.max_upload_bytes == MAX_UPLOAD_BYTES == 10 * 1024 * 1024
        assert s.app.min_text_chars == 50
        assert s.openai.model == "gpt-3.5-turbo"
        assert s.app.log_level == "INFO"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("QUIZ_TEMPERATURE", "0.2")
        monkeypatch.setenv("QUIZ_PROMPT_CHAR_LIMIT", "1500")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        s = get_settings()
        assert s.generation.temperature == 0.2
        assert s.generation.prompt_char_limit == 1500
        assert s.app.log_level == "DEBUG"

    def test_force_mock_defaults_false(self, monkeypatch):
        """FORCE_MOCK_MODE should default to False when env var is absent."""
        monkeypatch.delenv("FORCE_MOCK_MODE", raising=False)
        assert not get_settings().app.force_mock_mode

    def test_live_mode_false_without_credentials(self, monkeypatch):
        """live_mode should be False when model creds are placeholders."""
        monkeypatch.delenv("FORCE_MOCK_MODE", raising=False)
        monkeypatch.setenv("AZURE_OPENAI_ENDPOINT", "<placeholder>")
        monkeypatch.setenv("AZURE_OPENAI_API_KEY", "<placeholder>")
        monkeypatch.setenv("OPENAI_API_KEY", "<placeholder>")
        s = get_settings()
        assert not s.live_mode
        assert s.provider == "mock"

    def test_openai_key_enables_live_mode(self, monkeypatch):
        monkeypatch.delenv("FORCE_MOCK_MODE", raising=False)
        monkeypatch.setenv("AZURE_OPENAI_API_KEY", "<placeholder>")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-live-key-123")
        s = get_settings()
        assert s.live_mode
        assert s.provider == "openai"

    def test_azure_wins_over_openai(self, monkeypatch):
        monkeypatch.delenv("FORCE_MOCK_MODE", raising=False)
        monkeypatch.setenv("AZURE_OPENAI_ENDPOINT", "https://contoso.openai.azure.com/")
        monkeypatch.setenv("AZURE_OPENAI_API_KEY", "azure-key-123")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-live-key-123")
        s = get_settings()
        assert s.provider == "azure_openai"
        assert s.azure.endpoint == "https://contoso.openai.azure.com"

    def test_force_mock_overrides_credentials(self, monkeypatch):
        monkeypatch.setenv("FORCE_MOCK_MODE", "true")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-live-key-123")
        assert get_settings().provider == "mock"

    def test_status_summary_keys(self):
        summary = get_settings().status_summary()
        assert set(summary) == {"Azure OpenAI", "OpenAI", "Active provider"}
