"""
Rule configuration package.

- models: Immutable rule tree (Rule, ResponseGroup, Resource, RuleSet).
- loader: XML document loading with schema validation.
"""

from .loader import load_rule_set, parse_rule_set
from .models import HttpMethod, Resource, ResponseGroup, Rule, RuleSet

__all__ = [
    "HttpMethod",
    "Resource",
    "ResponseGroup",
    "Rule",
    "RuleSet",
    "load_rule_set",
    "parse_rule_set",
]
