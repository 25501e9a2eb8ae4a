from __future__ import annotations

"""Client share links and client-side outbounds built from client info."""

from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote, urlencode

from ..config.exceptions import ClientInfoError
from ..config.settings import REALITY_FINGERPRINT_DEFAULT, REALITY_FLOW_VISION
from ..models.client_info import ClientInfoRecord

_REQUIRED_FOR_EXPORT = ("DOMAIN", "UUID", "PUBLIC_KEY", "SHORT_ID")


class ExportMixin:
    """Turns a validated client info record into something a client can import."""

    def _export_fields(self, record: ClientInfoRecord) -> Mapping[str, str]:
        values = record.with_defaults()
        for key in _REQUIRED_FOR_EXPORT:
            if not values.get(key):
                raise ClientInfoError(f"Client info is missing {key}")
        if self._parse_port(values["REALITY_PORT"]) is None:
            raise ClientInfoError(f"Invalid REALITY_PORT in client info: {values['REALITY_PORT']}")
        return values

    def _parse_port(self, value: Any) -> Optional[int]:
        port = self._safe_int(value)
        if port is None or not 1 <= port <= 65535:
            return None
        return port

    @staticmethod
    def _uri_host(host: str) -> str:
        return f"[{host}]" if ":" in host and not host.startswith("[") else host

    def build_reality_uri(self, record: ClientInfoRecord) -> str:
        """Builds the `vless://` share link for the Reality inbound."""
        values = self._export_fields(record)
        port = self._parse_port(values["REALITY_PORT"])
        params = {
            "encryption": "none",
            "security": "reality",
            "flow": REALITY_FLOW_VISION,
            "sni": values["SNI"],
            "pbk": values["PUBLIC_KEY"],
            "sid": values["SHORT_ID"],
            "type": "tcp",
            "fp": REALITY_FINGERPRINT_DEFAULT,
        }
        query = urlencode(params, quote_via=quote)
        name = quote(f"Reality-{values['DOMAIN']}")
        return (
            f"vless://{quote(values['UUID'])}@{self._uri_host(values['DOMAIN'])}:{port}"
            f"?{query}#{name}"
        )

    def build_client_outbound(self, record: ClientInfoRecord) -> Dict[str, Any]:
        """Builds a sing-box client outbound and validates it before handing it out."""
        values = self._export_fields(record)
        outbound = {
            "type": "vless",
            "tag": "proxy",
            "server": values["DOMAIN"],
            "server_port": self._parse_port(values["REALITY_PORT"]),
            "uuid": values["UUID"],
            "flow": REALITY_FLOW_VISION,
            "tls": {
                "enabled": True,
                "server_name": values["SNI"],
                "utls": {"enabled": True, "fingerprint": REALITY_FINGERPRINT_DEFAULT},
                "reality": {
                    "enabled": True,
                    "public_key": values["PUBLIC_KEY"],
                    "short_id": values["SHORT_ID"],
                },
            },
        }
        self.check_fragment("outbound", outbound)
        return outbound
