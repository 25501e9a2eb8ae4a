"""Shared fixtures for the sbxlite test suite."""

import json
import os
import tempfile

# Settings are read on import; point them at a scratch home with no engine binary.
_HOME = tempfile.mkdtemp(prefix="sbxlite-home-")
os.environ["SBXLITE_HOME"] = _HOME
with open(os.path.join(_HOME, "config.json"), "w", encoding="utf-8") as _f:
    json.dump({"ENGINE_BINARY": os.path.join(_HOME, "sing-box")}, _f)

import pytest  # noqa: E402

from sbxlite import SingBox  # noqa: E402

FULL_CLIENT_INFO = (
    'DOMAIN="vpn.example.com"\n'
    'UUID="a1b2c3d4-e5f6-7890-abcd-ef1234567890"\n'
    'PUBLIC_KEY="jNXHt1yRo0vDuchQlIP6Z0ZvjT3KtzVI-T4E7RoLJS0"\n'
    'SHORT_ID="a1b2c3d4"\n'
    'SNI="www.microsoft.com"\n'
    'REALITY_PORT="443"\n'
)


def reality_inbound(**overrides):
    """Server-side VLESS Reality inbound as the installer writes it."""
    inbound = {
        "type": "vless",
        "tag": "in-reality",
        "listen": "::",
        "listen_port": 443,
        "users": [{"uuid": "a1b2c3d4-e5f6-7890-abcd-ef1234567890", "flow": "xtls-rprx-vision"}],
        "tls": {
            "enabled": True,
            "server_name": "www.microsoft.com",
            "reality": {
                "enabled": True,
                "private_key": "UuMBgl7MXTPx9inmQp2UC7Jcnwc6XYbwDNebonM-FCc",
                "short_id": ["a1b2c3d4"],
                "handshake": {"server": "www.microsoft.com", "server_port": 443},
                "max_time_difference": "1m",
            },
        },
    }
    inbound.update(overrides)
    return inbound


def server_document():
    return {
        "log": {"level": "warn", "timestamp": True},
        "dns": {
            "servers": [{"type": "local", "tag": "dns-local"}],
            "strategy": "ipv4_only",
        },
        "inbounds": [reality_inbound()],
        "outbounds": [{"type": "direct", "tag": "direct"}],
        "route": {
            "rules": [{"action": "sniff"}],
            "auto_detect_interface": True,
            "default_domain_resolver": {"server": "dns-local"},
        },
    }


@pytest.fixture
def client_info_file(tmp_path):
    """Writes client info text with mode 600 and returns its path."""

    def _write(text=FULL_CLIENT_INFO, name="client-info.txt", mode=0o600):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        path.chmod(mode)
        return path

    return _write


@pytest.fixture
def manager(tmp_path):
    return SingBox(
        client_info_path=tmp_path / "client-info.txt",
        config_path=tmp_path / "config.json",
        engine_binary=str(tmp_path / "missing-sing-box"),
        releases_api_url="https://api.example.test/repos/SagerNet/sing-box/releases",
    )
