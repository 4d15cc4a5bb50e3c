"""
Rule document loader.

Reads the XML rule document, validates it against the bundled schema and
turns it into an immutable RuleSet. Every failure surfaces as a
ConfigurationError so the service never starts with a broken rule set.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from lxml import etree
from pydantic import ValidationError

from shared.errors import ConfigurationError
from shared.logging import get_logger
from ..engine.matcher import document_expression
from .models import Resource, ResponseGroup, Rule, RuleSet


SCHEMA_PATH = Path(__file__).resolve().parent / "schema" / "configurations.xsd"

logger = get_logger("mock.config_loader")

_schema: Optional[etree.XMLSchema] = None


def _get_schema() -> etree.XMLSchema:
    """Load the document schema once."""
    global _schema
    if _schema is None:
        _schema = etree.XMLSchema(etree.parse(str(SCHEMA_PATH)))
    return _schema


def load_rule_set(path: Union[str, Path]) -> RuleSet:
    """Load, validate and parse the rule document at ``path``."""
    path = Path(path)
    logger.info("About to load the configuration", path=str(path))
    try:
        source = path.read_bytes()
    except OSError as e:
        raise ConfigurationError(
            "Configuration file could not be read",
            details={"path": str(path), "error": str(e)}
        ) from e
    return parse_rule_set(source, origin=str(path))


def parse_rule_set(source: Union[bytes, str], origin: str = "<string>") -> RuleSet:
    """Validate and parse a rule document held in memory."""
    if isinstance(source, str):
        source = source.encode("utf-8")

    try:
        document = etree.fromstring(source, parser=etree.XMLParser(resolve_entities=False))
    except etree.XMLSyntaxError as e:
        raise ConfigurationError(
            "Configuration is not well-formed XML",
            details={"origin": origin, "error": str(e)}
        ) from e

    schema = _get_schema()
    if not schema.validate(document):
        errors = [f"line {entry.line}: {entry.message}" for entry in schema.error_log]
        raise ConfigurationError(
            "Configuration does not conform to the schema",
            details={"origin": origin, "errors": errors}
        )

    try:
        rules = [_parse_rule(element) for element in document.findall("configuration")]
        rule_set = RuleSet(rules=tuple(rules))
    except ValidationError as e:
        raise ConfigurationError(
            "Configuration contains invalid rules",
            details={"origin": origin, "errors": [err["msg"] for err in e.errors()]}
        ) from e

    for rule in rule_set.rules:
        _check_rule(rule)

    logger.info("Configuration loaded", origin=origin, total_rules=len(rule_set.rules))
    return rule_set


def _parse_rule(element: etree._Element) -> Rule:
    data: Dict[str, Any] = {
        "method": element.get("type"),
        "url": element.get("url"),
        "namespaces": _parse_namespaces(element.find("namespaces")),
    }

    simple = element.find("resource")
    if simple is not None:
        data["simple_response"] = _parse_resource(simple)

    groups = element.find("resource-groups")
    if groups is not None:
        data["groups"] = tuple(_parse_group(group) for group in groups.findall("resource-group"))

    return Rule(**data)


def _parse_namespaces(element: Optional[etree._Element]) -> Dict[str, str]:
    if element is None:
        return {}
    return {
        namespace.get("prefix"): (namespace.text or "").strip()
        for namespace in element.findall("namespace")
    }


def _parse_group(element: etree._Element) -> ResponseGroup:
    xpath = element.find("xpath")
    return ResponseGroup(
        condition=xpath.text if xpath is not None else None,
        response=_parse_resource(element.find("resource")),
    )


def _parse_resource(element: etree._Element) -> Resource:
    return Resource(
        location=(element.text or "").strip(),
        delay_ms=int(element.get("delay", "0")),
    )


def _check_rule(rule: Rule) -> None:
    """Compile conditions and warn about groups that can never be reached."""
    for group in rule.groups:
        if not group.is_conditional:
            continue
        try:
            etree.XPath(document_expression(group.condition), namespaces=rule.namespace_map or None)
        except etree.XPathError as e:
            raise ConfigurationError(
                "Invalid xpath condition",
                details={"url": rule.url, "xpath": group.condition, "error": str(e)}
            ) from e

    shadow_index = rule.shadowing_group_index()
    if shadow_index is not None:
        unreachable: List[int] = list(range(shadow_index + 1, len(rule.groups)))
        logger.warning(
            "Unconditional response group shadows later groups",
            method=rule.method.value,
            url=rule.url,
            group_index=shadow_index,
            unreachable_groups=unreachable
        )
