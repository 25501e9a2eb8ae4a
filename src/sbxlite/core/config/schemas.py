"""
Schema rules for the sing-box configuration sections sbxlite generates.

Every rule is an immutable record: required fields, field kinds, and the
engine versions that gate them. The validator interprets these tables; adding
a section means adding a rule here, not new code paths.
"""

from types import MappingProxyType
from typing import Mapping

from ..models.schema import FieldKind, FieldSpec, SchemaRule
from .settings import DNS_STRATEGIES, MODERN_CONFIG_VERSION

_S = FieldKind.STRING
_B = FieldKind.BOOLEAN
_A = FieldKind.ARRAY
_O = FieldKind.OBJECT

HANDSHAKE_RULE = SchemaRule(
    section="handshake",
    fields=(
        FieldSpec("server", (_S,), required=True),
        FieldSpec("server_port", (FieldKind.PORT,), required=True),
    ),
)

# Server-side Reality block (inbound `tls.reality`)
REALITY_REQUIRED_FIELDS = ("private_key", "short_id", "handshake")

REALITY_RULE = SchemaRule(
    section="reality",
    fields=(
        FieldSpec("private_key", (_S,), required=True),
        FieldSpec(
            "short_id",
            (_A,),
            required=True,
            item_kind=FieldKind.HEX_STRING,
            non_empty=True,
            max_length=8,
        ),
        FieldSpec("handshake", (_O,), required=True, rule=HANDSHAKE_RULE),
        FieldSpec("enabled", (_B,)),
        FieldSpec("max_time_difference", (_S,)),
    ),
)

# Client-side Reality block (outbound `tls.reality`)
REALITY_CLIENT_RULE = SchemaRule(
    section="reality",
    fields=(
        FieldSpec("public_key", (_S,), required=True),
        FieldSpec("short_id", (FieldKind.HEX_STRING,), max_length=8),
        FieldSpec("enabled", (_B,)),
    ),
)

TLS_RULE = SchemaRule(
    section="tls",
    fields=(
        FieldSpec("enabled", (_B,)),
        FieldSpec("server_name", (_S,)),
        FieldSpec("alpn", (_A,), item_kind=_S),
        FieldSpec("certificate_path", (_S,)),
        FieldSpec("key_path", (_S,)),
        FieldSpec("reality", (_O,)),
    ),
)

INBOUND_RULE = SchemaRule(
    section="inbound",
    fields=(
        FieldSpec("type", (_S,), required=True),
        FieldSpec("tag", (_S,), required=True),
        FieldSpec("listen", (_S,)),
        FieldSpec("listen_port", (FieldKind.PORT,)),
        FieldSpec("users", (_A,), item_kind=_O),
        FieldSpec("tls", (_O,), rule=TLS_RULE),
        FieldSpec("transport", (_O,)),
        FieldSpec("multiplex", (_O,)),
    ),
    deprecated=(
        FieldSpec("sniff", (), deprecated_since=MODERN_CONFIG_VERSION),
        FieldSpec("sniff_override_destination", (), deprecated_since=MODERN_CONFIG_VERSION),
        FieldSpec("domain_strategy", (), deprecated_since=MODERN_CONFIG_VERSION),
    ),
)

OUTBOUND_RULE = SchemaRule(
    section="outbound",
    fields=(
        FieldSpec("type", (_S,), required=True),
        FieldSpec("tag", (_S,), required=True),
        FieldSpec("server", (_S,)),
        FieldSpec("server_port", (FieldKind.PORT,)),
        FieldSpec("tls", (_O,), rule=TLS_RULE),
    ),
    deprecated=(
        FieldSpec("domain_strategy", (), deprecated_since=MODERN_CONFIG_VERSION),
    ),
)

DNS_SERVER_RULE = SchemaRule(
    section="dns server",
    fields=(
        FieldSpec("type", (_S,), required=True, min_version=MODERN_CONFIG_VERSION),
        FieldSpec("tag", (_S,)),
    ),
)

DNS_RULE = SchemaRule(
    section="dns",
    fields=(
        FieldSpec("servers", (_A,), required=True, item_kind=_O, rule=DNS_SERVER_RULE),
        FieldSpec("strategy", (FieldKind.ENUM,), choices=DNS_STRATEGIES),
        FieldSpec("cache_capacity", (FieldKind.INTEGER,)),
        FieldSpec("final", (_S,)),
    ),
)

ROUTE_RULE = SchemaRule(
    section="route",
    fields=(
        FieldSpec("rules", (_A,), required=True, item_kind=_O),
        FieldSpec("final", (_S,)),
        FieldSpec("auto_detect_interface", (_B,)),
        FieldSpec(
            "default_domain_resolver",
            (_O, _S),
            required=True,
            min_version=MODERN_CONFIG_VERSION,
        ),
    ),
)

LOG_RULE = SchemaRule(
    section="log",
    fields=(
        FieldSpec("level", (_S,)),
        FieldSpec("timestamp", (_B,)),
    ),
)

DOCUMENT_RULE = SchemaRule(
    section="config",
    fields=(
        FieldSpec("inbounds", (_A,), required=True, item_kind=_O),
        FieldSpec("outbounds", (_A,), required=True, item_kind=_O),
        FieldSpec("log", (_O,), rule=LOG_RULE),
        FieldSpec("dns", (_O,)),
        FieldSpec("route", (_O,)),
    ),
)

SECTION_RULES: Mapping[str, SchemaRule] = MappingProxyType({
    "inbound": INBOUND_RULE,
    "outbound": OUTBOUND_RULE,
    "dns": DNS_RULE,
    "route": ROUTE_RULE,
    "reality": REALITY_RULE,
})
