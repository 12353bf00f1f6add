"""设置存储测试：覆盖文件、密钥分离与掩码。"""

import json

import pytest

from stylerecon.server import settings_store


@pytest.fixture(autouse=True)
def _workspace(monkeypatch, tmp_path):
    monkeypatch.setenv("STYLERECON_WORKSPACE_ROOT", str(tmp_path))
    for key in ("GEMINI_API_KEY", "STYLERECON_VISION_ENABLED", "STYLERECON_SAMPLE_COUNT", "STYLERECON_CONFIG_PATH"):
        monkeypatch.delenv(key, raising=False)
    return tmp_path


def test_api_key_is_stored_as_secret_and_masked(_workspace):
    bundle = settings_store.update_settings(
        settings_patch={"vision": {"enabled": True, "api_key": "abc123"}, "sampling": {"count": 8}},
    )

    assert bundle["settings"]["vision"]["api_key"] == "***"
    assert bundle["has_secrets"]["vision.api_key"] is True
    assert bundle["vision_ready"] is True
    assert "api_key" not in bundle["override"].get("vision", {})
    secrets = json.loads((_workspace / "configs" / "secrets.json").read_text())
    assert secrets == {"vision": {"api_key": "abc123"}}

    config = settings_store.build_config()
    assert config.vision.api_key == "abc123"
    assert config.sampling.count == 8


def test_masked_value_does_not_overwrite_key(_workspace):
    settings_store.update_settings(settings_patch={"vision": {"api_key": "abc123"}})

    settings_store.update_settings(settings_patch={"vision": {"api_key": "***", "enabled": True}})

    assert settings_store.build_config().vision.api_key == "abc123"


def test_empty_key_clears_secret(_workspace):
    settings_store.update_settings(settings_patch={}, secrets_patch={"vision": {"api_key": "abc123"}})

    bundle = settings_store.update_settings(settings_patch={}, secrets_patch={"vision": {"api_key": ""}})

    assert bundle["has_secrets"]["vision.api_key"] is False
    assert settings_store.build_config().vision.api_key == ""


def test_invalid_settings_rejected(_workspace):
    with pytest.raises(ValueError):
        settings_store.update_settings(settings_patch={"sampling": {"count": 0}})
    assert not (_workspace / "configs" / "override.yaml").exists()


def test_reset_removes_overrides(_workspace):
    settings_store.update_settings(settings_patch={"sampling": {"count": 3}, "vision": {"api_key": "k"}})

    settings_store.reset_settings()

    config = settings_store.build_config()
    assert config.sampling.count == 12
    assert config.vision.api_key == ""
