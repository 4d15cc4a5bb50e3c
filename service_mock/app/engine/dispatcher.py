"""
Dispatcher: selects and serves the mocked response for a request.
"""

from typing import Optional, TYPE_CHECKING, Union

from shared.logging import get_logger
from ..config.models import HttpMethod, Rule
from .index import ConfigurationIndex
from .matcher import BodyMatcher
from .resource_cache import ResourceCache

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


class _NotFound:
    """Outcome when no rule or response group matches."""

    _instance: Optional["_NotFound"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND = _NotFound()


class Dispatcher:
    """Entry point used by the transport layer."""

    def __init__(
        self,
        index: ConfigurationIndex,
        matcher: BodyMatcher,
        cache: ResourceCache,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.index = index
        self.matcher = matcher
        self.cache = cache
        self.metrics = metrics
        self.logger = get_logger("mock.dispatcher")

    async def resolve(self, method: str, path: str, body: Union[bytes, str] = b"") -> Union[str, _NotFound]:
        """Return the response content for the request, or NOT_FOUND."""
        method = method.upper()
        self.logger.debug("About to find response", method=method, path=path)

        rule = self.index.lookup(method, path)
        if rule is None:
            result = NOT_FOUND
        elif method == HttpMethod.GET.value:
            result = await self.cache.get(rule.simple_response)
        else:
            result = await self._resolve_post(rule, body)

        if result is NOT_FOUND:
            self.logger.debug("... not found", method=method, path=path)
        self._record(method, result)
        return result

    async def _resolve_post(self, rule: Rule, body: Union[bytes, str]) -> Union[str, _NotFound]:
        if not rule.groups:
            return await self.cache.get(rule.simple_response)

        for position, group in enumerate(rule.groups):
            if group.is_conditional:
                if not self.matcher.matches(group.condition, body, rule.namespace_map):
                    continue
                self.logger.debug("... xpath matched", url=rule.url, group=position, xpath=group.condition)
            else:
                self.logger.debug("... unconditional group", url=rule.url, group=position)
            return await self.cache.get(group.response)

        return NOT_FOUND

    def _record(self, method: str, result: Union[str, _NotFound]):
        if self.metrics:
            self.metrics.record_resolution(method, "not_found" if result is NOT_FOUND else "hit")
