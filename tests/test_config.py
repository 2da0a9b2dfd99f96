from __future__ import annotations

from pasarantar_server.config import Settings


def test_defaults(monkeypatch) -> None:
    for name in ("PASARANTAR_API_URL", "PASARANTAR_SERVER_URL", "PASARANTAR_STORAGE_FILE", "PASARANTAR_TOAST_SECONDS", "PASARANTAR_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()

    assert settings.api_url == "http://localhost:3000"
    assert settings.server_url == "http://localhost:3000"
    assert settings.toast_seconds == 4.0
    assert settings.storage_file.endswith(".pasarantar_storage.json")


def test_environment_overrides(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("PASARANTAR_API_URL", "https://api.pasarantar.test")
    monkeypatch.setenv("PASARANTAR_STORAGE_FILE", str(tmp_path / "s.json"))
    monkeypatch.setenv("PASARANTAR_TOAST_SECONDS", "2.5")
    monkeypatch.delenv("PASARANTAR_SERVER_URL", raising=False)

    settings = Settings.from_env()

    assert settings.api_url == "https://api.pasarantar.test"
    assert settings.server_url == "https://api.pasarantar.test"
    assert settings.storage_file == str(tmp_path / "s.json")
    assert settings.toast_seconds == 2.5
