"""
Configuration index: rules partitioned by HTTP method, keyed by url.
"""

from typing import Dict, Optional, Tuple

from shared.logging import get_logger
from ..config.models import HttpMethod, Rule, RuleSet


logger = get_logger("mock.index")


def build_index(rule_set: RuleSet) -> Tuple[Dict[str, Rule], Dict[str, Rule]]:
    """Partition ``rule_set`` into (get_rules, post_rules).

    Duplicate urls within one method overwrite earlier entries, so the
    last declared rule wins.
    """
    get_rules: Dict[str, Rule] = {}
    post_rules: Dict[str, Rule] = {}

    for rule in rule_set.rules:
        if rule.method is HttpMethod.POST:
            table = post_rules
        else:
            table = get_rules
        if rule.url in table:
            logger.warning("Duplicate url, last rule wins", method=rule.method.value, url=rule.url)
        table[rule.url] = rule

    logger.info(
        "URL mappings parsed",
        post_rules=len(post_rules),
        get_rules=len(get_rules)
    )
    return get_rules, post_rules


class ConfigurationIndex:
    """Lookup tables for GET and POST rules."""

    def __init__(self, rule_set: RuleSet):
        self.get_rules, self.post_rules = build_index(rule_set)

    def lookup(self, method: str, path: str) -> Optional[Rule]:
        """Find the rule for ``method`` and ``path``, if any."""
        method = method.upper()
        if method == HttpMethod.GET.value:
            return self.get_rules.get(path)
        if method == HttpMethod.POST.value:
            return self.post_rules.get(path)
        return None
