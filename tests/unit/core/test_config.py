from kube_engine.core.config import Settings


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.name_label == "io.drone.name"
        assert settings.script_env_var == "DRONE_SCRIPT"
        assert settings.readiness_fail_on_terminal_phase is False
        assert settings.watch_window_seconds == 1
        assert settings.exec_command == ["sh", "-c", 'echo "$DRONE_SCRIPT" | sh']

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("KUBE_ENGINE_SCRIPT_ENV_VAR", "CI_SCRIPT")
        monkeypatch.setenv("KUBE_ENGINE_WATCH_WINDOW_SECONDS", "5")

        settings = Settings(_env_file=None)

        assert settings.watch_window_seconds == 5
        assert settings.exec_command == ["sh", "-c", 'echo "$CI_SCRIPT" | sh']

    def test_otlp_headers(self):
        settings = Settings(_env_file=None, otlp_token="tok", otlp_dataset="traces")

        assert settings.otlp_headers == {
            "Authorization": "Bearer tok",
            "X-Axiom-Dataset": "traces",
        }
