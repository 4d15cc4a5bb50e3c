"""
Unit tests for the Dispatcher.
"""

import asyncio
import pytest
from unittest.mock import MagicMock

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_mock.app.config.loader import load_rule_set
from service_mock.app.config.models import Resource, ResponseGroup, Rule, RuleSet
from service_mock.app.engine.dispatcher import Dispatcher, NOT_FOUND
from service_mock.app.engine.index import ConfigurationIndex
from service_mock.app.engine.matcher import BodyMatcher
from service_mock.app.engine.resource_cache import ResourceCache
from shared.errors import MalformedBodyError, ResourceUnavailableError
from shared.test_helpers import create_test_metrics, namespaced_message, write_mock_setup


class TestDispatcher:
    """Test cases for Dispatcher."""

    @pytest.fixture
    def config_path(self, tmp_path):
        """Rule document and resources on disk."""
        return write_mock_setup(tmp_path)

    @pytest.fixture
    def metrics(self):
        """Private metrics collector."""
        return create_test_metrics()

    @pytest.fixture
    def dispatcher(self, config_path, metrics):
        """Create Dispatcher over the orders document."""
        index = ConfigurationIndex(load_rule_set(config_path))
        cache = ResourceCache(config_path.parent)
        return Dispatcher(index, BodyMatcher(), cache, metrics=metrics)

    @pytest.mark.asyncio
    async def test_get_known_path(self, dispatcher):
        """Test GET returns the rule's resource."""
        assert await dispatcher.resolve("GET", "/status", "") == '{"status": "ok"}'

    @pytest.mark.asyncio
    async def test_get_is_idempotent(self, dispatcher):
        """Test repeated GETs return identical content."""
        first = await dispatcher.resolve("GET", "/status")
        second = await dispatcher.resolve("get", "/status")

        assert first == second

    @pytest.mark.asyncio
    async def test_get_unknown_path(self, dispatcher):
        """Test unknown paths are NOT_FOUND, not an error."""
        result = await dispatcher.resolve("GET", "/nope", "")

        assert result is NOT_FOUND
        assert not result

    @pytest.mark.asyncio
    async def test_post_first_matching_group_wins(self, dispatcher):
        """Test a body satisfying the first condition gets the first resource."""
        body = '<order status="PAID"><item/></order>'

        assert await dispatcher.resolve("POST", "/orders", body) == "<response>paid</response>"

    @pytest.mark.asyncio
    async def test_post_second_group(self, dispatcher):
        """Test a body satisfying only the second condition."""
        body = '<order status="NEW"><item/></order>'

        assert await dispatcher.resolve("POST", "/orders", body) == "<response>items</response>"

    @pytest.mark.asyncio
    async def test_post_catch_all(self, dispatcher):
        """Test a body satisfying no condition falls through to the catch-all."""
        body = '<order status="NEW"/>'

        assert await dispatcher.resolve("POST", "/orders", body) == "<response>default</response>"

    @pytest.mark.asyncio
    async def test_post_without_catch_all_is_not_found(self, dispatcher):
        """Test exhausting conditional groups yields NOT_FOUND."""
        result = await dispatcher.resolve("POST", "/strict", '<order status="NEW"/>')

        assert result is NOT_FOUND

    @pytest.mark.asyncio
    async def test_post_namespaced(self, dispatcher):
        """Test conditions using the rule's namespace bindings."""
        assert await dispatcher.resolve("POST", "/ns", namespaced_message("1")) == "<response>paid</response>"
        assert await dispatcher.resolve("POST", "/ns", namespaced_message("2")) is NOT_FOUND

    @pytest.mark.asyncio
    async def test_post_simple_resource(self, dispatcher):
        """Test POST rules with a single resource ignore the body."""
        assert await dispatcher.resolve("POST", "/plain", "anything") == "<response>default</response>"

    @pytest.mark.asyncio
    async def test_post_unknown_path(self, dispatcher):
        """Test unknown POST paths are NOT_FOUND."""
        assert await dispatcher.resolve("POST", "/status", "<order/>") is NOT_FOUND

    @pytest.mark.asyncio
    async def test_unsupported_method(self, dispatcher):
        """Test methods other than GET and POST are NOT_FOUND."""
        assert await dispatcher.resolve("PUT", "/status", "") is NOT_FOUND

    @pytest.mark.asyncio
    async def test_malformed_body_raises(self, dispatcher):
        """Test malformed bodies are errors, never a silent NOT_FOUND."""
        with pytest.raises(MalformedBodyError):
            await dispatcher.resolve("POST", "/orders", "status=PAID")

        with pytest.raises(MalformedBodyError):
            await dispatcher.resolve("POST", "/strict", "")

    @pytest.mark.asyncio
    async def test_missing_resource_raises(self, dispatcher):
        """Test unreadable resources propagate to the caller."""
        with pytest.raises(ResourceUnavailableError):
            await dispatcher.resolve("GET", "/missing", "")

    @pytest.mark.asyncio
    async def test_concurrent_requests_keep_group_order(self, dispatcher):
        """Test concurrent calls to one rule each evaluate independently."""
        bodies = ['<order status="PAID"/>', '<order><item/></order>', '<order/>'] * 10

        results = await asyncio.gather(*(dispatcher.resolve("POST", "/orders", body) for body in bodies))

        expected = ["<response>paid</response>", "<response>items</response>", "<response>default</response>"] * 10
        assert results == expected

    @pytest.mark.asyncio
    async def test_resolution_metrics(self, dispatcher, metrics):
        """Test hits and misses are counted."""
        await dispatcher.resolve("GET", "/status")
        await dispatcher.resolve("GET", "/nope")

        assert metrics.registry.get_sample_value("mock_resolutions_total", {"method": "GET", "outcome": "hit"}) == 1
        assert metrics.registry.get_sample_value("mock_resolutions_total", {"method": "GET", "outcome": "not_found"}) == 1


class TestDispatcherGroupOrder:
    """Test cases for declared-order evaluation."""

    @pytest.fixture
    def resource_dir(self, tmp_path):
        for name in ("a", "b", "catch"):
            (tmp_path / f"{name}.txt").write_text(name, encoding="utf-8")
        return tmp_path

    def build(self, resource_dir, groups, matcher=None):
        rule = Rule(method="POST", url="/x", groups=tuple(groups))
        index = ConfigurationIndex(RuleSet(rules=(rule,)))
        return Dispatcher(index, matcher or BodyMatcher(), ResourceCache(resource_dir))

    @pytest.mark.asyncio
    async def test_leading_catch_all_shadows_later_groups(self, resource_dir):
        """Test an unconditional group matches at once, in declared position."""
        matcher = MagicMock(spec=BodyMatcher)
        dispatcher = self.build(resource_dir, [
            ResponseGroup(response=Resource(location="catch.txt")),
            ResponseGroup(condition="/a", response=Resource(location="a.txt")),
        ], matcher)

        assert await dispatcher.resolve("POST", "/x", "<a/>") == "catch"
        matcher.matches.assert_not_called()

    @pytest.mark.asyncio
    async def test_evaluation_stops_at_first_match(self, resource_dir):
        """Test no condition after the first match is evaluated."""
        matcher = MagicMock(spec=BodyMatcher)
        matcher.matches.side_effect = [False, True]
        dispatcher = self.build(resource_dir, [
            ResponseGroup(condition="/a", response=Resource(location="a.txt")),
            ResponseGroup(condition="/b", response=Resource(location="b.txt")),
            ResponseGroup(condition="/c", response=Resource(location="catch.txt")),
        ], matcher)

        assert await dispatcher.resolve("POST", "/x", "<b/>") == "b"
        assert [call.args[0] for call in matcher.matches.call_args_list] == ["/a", "/b"]
