from __future__ import annotations

"""Structural validation of sing-box configuration fragments."""

import logging
import re
from collections.abc import Mapping
from typing import Any, Optional

from ..config.schemas import (
    DOCUMENT_RULE,
    REALITY_CLIENT_RULE,
    REALITY_REQUIRED_FIELDS,
    REALITY_RULE,
    SECTION_RULES,
)
from ..config.settings import REALITY_FLOW_VISION
from ..models.schema import FieldKind, FieldSpec, SchemaRule, ValidationOutcome
from .versioning import meets_minimum

logger = logging.getLogger(__name__)

_HEX = re.compile(r"[0-9a-fA-F]+")


def _present(value: Mapping, name: str) -> bool:
    return name in value and value[name] is not None


class SchemaValidator:
    """Checks decoded JSON structures against the rules in `config.schemas`.

    Validation is all-or-nothing: the first failure in declaration order is
    returned and nothing else is reported. The validator holds no mutable state,
    so one instance can be shared freely.
    """

    def __init__(self, rules: Optional[Mapping] = None) -> None:
        self.rules = rules if rules is not None else SECTION_RULES

    def validate(
        self, section: str, value: Any, installed_version: Optional[str] = None
    ) -> ValidationOutcome:
        """Validates `value` as the named section (inbound, outbound, dns, route, reality)."""
        name = str(section).strip().lower()
        rule = self.rules.get(name)
        if rule is None:
            raise ValueError(f"Unknown configuration section: {section!r}")

        if rule is REALITY_RULE:
            outcome = self.validate_reality(value, installed_version)
        else:
            outcome = self._check_rule(rule, value, installed_version)
            if outcome and name == "inbound":
                outcome = self._check_inbound_reality(value, installed_version)
            elif outcome and name == "outbound":
                outcome = self._check_outbound_reality(value, installed_version)

        if not outcome:
            logger.debug("%s rejected: %s", name, outcome.message)
        return outcome

    def validate_reality(
        self, value: Any, installed_version: Optional[str] = None
    ) -> ValidationOutcome:
        """Validates a server-side Reality block: required secrets first, then field types."""
        if not isinstance(value, Mapping):
            return ValidationOutcome.wrong_type("reality", FieldKind.OBJECT.value)

        outcome = self._check_reality_required_fields(value)
        if not outcome:
            return outcome
        return self._check_reality_field_types(value, installed_version)

    def validate_document(
        self, document: Any, installed_version: Optional[str] = None
    ) -> ValidationOutcome:
        """Validates a whole sing-box configuration document."""
        outcome = self._check_rule(DOCUMENT_RULE, document, installed_version)
        if not outcome:
            return outcome

        for collection, section in (("inbounds", "inbound"), ("outbounds", "outbound")):
            for index, entry in enumerate(document[collection]):
                outcome = self.validate(section, entry, installed_version)
                if not outcome:
                    return outcome.nested(f"{collection}[{index}]")

        for section in ("dns", "route"):
            if _present(document, section):
                outcome = self.validate(section, document[section], installed_version)
                if not outcome:
                    return outcome.nested(section)

        return self._check_port_conflicts(document["inbounds"])

    # --- Reality sub-checks ---

    @staticmethod
    def _check_reality_required_fields(value: Mapping) -> ValidationOutcome:
        for name in REALITY_REQUIRED_FIELDS:
            if not _present(value, name):
                return ValidationOutcome.missing(name)
        return ValidationOutcome.ok()

    def _check_reality_field_types(
        self, value: Mapping, installed_version: Optional[str]
    ) -> ValidationOutcome:
        return self._check_rule(REALITY_RULE, value, installed_version)

    def _check_inbound_reality(
        self, inbound: Mapping, installed_version: Optional[str]
    ) -> ValidationOutcome:
        tls = inbound.get("tls")
        if not isinstance(tls, Mapping) or not _present(tls, "reality"):
            return ValidationOutcome.ok()

        reality = tls["reality"]
        outcome = self.validate_reality(reality, installed_version)
        if not outcome:
            return outcome.nested("tls.reality")
        if reality.get("enabled") is not True:
            return ValidationOutcome.wrong_type("tls.reality.enabled", "true")
        if tls.get("enabled") is not True:
            return ValidationOutcome.wrong_type("tls.enabled", "true when reality is configured")

        for index, user in enumerate(inbound.get("users") or ()):
            flow = user.get("flow")
            if flow is None or flow == "":
                logger.warning(
                    "Reality inbound %r user %d has no flow; Vision requires %s",
                    inbound.get("tag"), index, REALITY_FLOW_VISION,
                )
            elif flow != REALITY_FLOW_VISION:
                return ValidationOutcome.wrong_type(f"users[{index}].flow", REALITY_FLOW_VISION)
        return ValidationOutcome.ok()

    def _check_outbound_reality(
        self, outbound: Mapping, installed_version: Optional[str]
    ) -> ValidationOutcome:
        tls = outbound.get("tls")
        if not isinstance(tls, Mapping) or not _present(tls, "reality"):
            return ValidationOutcome.ok()
        outcome = self._check_rule(REALITY_CLIENT_RULE, tls["reality"], installed_version)
        return outcome.nested("tls.reality")

    @staticmethod
    def _check_port_conflicts(inbounds: Any) -> ValidationOutcome:
        seen = set()
        for index, inbound in enumerate(inbounds):
            port = inbound.get("listen_port")
            if port is None:
                continue
            if port in seen:
                return ValidationOutcome.port_conflict(f"inbounds[{index}].listen_port", port)
            seen.add(port)
        return ValidationOutcome.ok()

    # --- Generic rule interpretation ---

    @staticmethod
    def _applies(spec: FieldSpec, installed_version: Optional[str]) -> bool:
        """Version-gated fields only count once the installed engine reaches their minimum."""
        return spec.min_version is None or meets_minimum(installed_version, spec.min_version)

    def _check_rule(
        self, rule: SchemaRule, value: Any, installed_version: Optional[str]
    ) -> ValidationOutcome:
        if not isinstance(value, Mapping):
            return ValidationOutcome.wrong_type(rule.section, FieldKind.OBJECT.value)

        for spec in rule.fields:
            if spec.required and self._applies(spec, installed_version) and not _present(value, spec.name):
                return ValidationOutcome.missing(spec.name)

        for spec in rule.deprecated:
            if spec.name in value and meets_minimum(installed_version, spec.deprecated_since):
                return ValidationOutcome.deprecated(spec.name, spec.deprecated_since)

        for spec in rule.fields:
            if not _present(value, spec.name) or not self._applies(spec, installed_version):
                continue
            outcome = self._check_field(spec, value[spec.name], installed_version)
            if not outcome:
                return outcome

        return ValidationOutcome.ok()

    def _check_field(
        self, spec: FieldSpec, item: Any, installed_version: Optional[str]
    ) -> ValidationOutcome:
        if not any(self._matches(kind, item, spec) for kind in spec.kinds):
            return ValidationOutcome.wrong_type(spec.name, spec.expected)

        if isinstance(item, (list, tuple)) and spec.item_kind is not None:
            if spec.non_empty and not item:
                return ValidationOutcome.wrong_type(spec.name, spec.expected)
            for index, element in enumerate(item):
                path = f"{spec.name}[{index}]"
                if not self._matches(spec.item_kind, element, spec):
                    return ValidationOutcome.wrong_type(path, self._describe(spec.item_kind, spec))
                if spec.rule is not None:
                    outcome = self._check_rule(spec.rule, element, installed_version)
                    if not outcome:
                        return outcome.nested(path)
        elif spec.rule is not None and isinstance(item, Mapping):
            outcome = self._check_rule(spec.rule, item, installed_version)
            if not outcome:
                return outcome.nested(spec.name)

        return ValidationOutcome.ok()

    @staticmethod
    def _matches(kind: FieldKind, item: Any, spec: FieldSpec) -> bool:
        """Runtime kind test; booleans never count as numbers."""
        if kind is FieldKind.STRING:
            return isinstance(item, str)
        if kind is FieldKind.BOOLEAN:
            return isinstance(item, bool)
        if kind is FieldKind.INTEGER:
            return isinstance(item, int) and not isinstance(item, bool)
        if kind is FieldKind.NUMBER:
            return isinstance(item, (int, float)) and not isinstance(item, bool)
        if kind is FieldKind.ARRAY:
            return isinstance(item, (list, tuple))
        if kind is FieldKind.OBJECT:
            return isinstance(item, Mapping)
        if kind is FieldKind.ENUM:
            return isinstance(item, str) and item in spec.choices
        if kind is FieldKind.PORT:
            return isinstance(item, int) and not isinstance(item, bool) and 1 <= item <= 65535
        if kind is FieldKind.HEX_STRING:
            if not isinstance(item, str) or not _HEX.fullmatch(item):
                return False
            return spec.max_length is None or len(item) <= spec.max_length
        return False

    @staticmethod
    def _describe(kind: FieldKind, spec: FieldSpec) -> str:
        if kind is FieldKind.HEX_STRING and spec.max_length is not None:
            return f"hex string of 1-{spec.max_length} characters"
        return kind.value


_default_validator = SchemaValidator()


def validate(section: str, value: Any, installed_version: Optional[str] = None) -> ValidationOutcome:
    """Validates one configuration section with the built-in rules."""
    return _default_validator.validate(section, value, installed_version)


def validate_reality_structure(value: Any, installed_version: Optional[str] = None) -> ValidationOutcome:
    """Validates a server-side Reality block with the built-in rules."""
    return _default_validator.validate_reality(value, installed_version)


def validate_document(document: Any, installed_version: Optional[str] = None) -> ValidationOutcome:
    """Validates a whole sing-box configuration document with the built-in rules."""
    return _default_validator.validate_document(document, installed_version)
