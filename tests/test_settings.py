import json

import pytest

from sbxlite import SbxError
from sbxlite.core.config import settings


def test_creates_defaults_when_missing(tmp_path, monkeypatch):
    monkeypatch.setenv("SBXLITE_HOME", str(tmp_path / "home"))

    config = settings._initialize_config()

    written = json.loads((tmp_path / "home" / "config.json").read_text(encoding="utf-8"))
    assert written == config == settings._DEFAULT_CONFIG_VALUES


def test_back_fills_missing_keys(tmp_path, monkeypatch):
    monkeypatch.setenv("SBXLITE_HOME", str(tmp_path))
    (tmp_path / "config.json").write_text(json.dumps({"CONFIG_PATH": "/srv/sb.json"}), encoding="utf-8")

    config = settings._initialize_config()

    assert config["CONFIG_PATH"] == "/srv/sb.json"
    assert config["CLIENT_INFO_PATH"] == "/etc/sing-box/client-info.txt"
    assert json.loads((tmp_path / "config.json").read_text(encoding="utf-8")) == config


@pytest.mark.parametrize("content", ["{broken", "[1, 2]"])
def test_corrupt_settings_raise(tmp_path, monkeypatch, content):
    monkeypatch.setenv("SBXLITE_HOME", str(tmp_path))
    (tmp_path / "config.json").write_text(content, encoding="utf-8")

    with pytest.raises(SbxError):
        settings._initialize_config()
