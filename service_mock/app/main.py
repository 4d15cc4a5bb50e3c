"""
Mock service for the declarative HTTP mock.
"""

from typing import Any, Dict, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from shared.base_service import BaseService, UNMATCHED_ENDPOINT
from shared.config import MockSettings, get_settings
from shared.errors import ErrorResponse
from shared.logging import get_request_id
from shared.metrics import MetricsCollector

from .config.loader import load_rule_set
from .engine.dispatcher import Dispatcher, NOT_FOUND
from .engine.index import ConfigurationIndex
from .engine.matcher import BodyMatcher
from .engine.resource_cache import ResourceCache


class MockService(BaseService):
    """Mock service implementation."""

    def __init__(self, settings: Optional[MockSettings] = None, metrics: Optional[MetricsCollector] = None):
        settings = settings or get_settings()
        super().__init__("mock", settings, metrics)

        # A broken rule document aborts startup with ConfigurationError
        config_path = settings.resolved_config_path()
        self.rule_set = load_rule_set(config_path)
        self.index = ConfigurationIndex(self.rule_set)
        self.cache = ResourceCache(settings.resolved_resource_root(), metrics=self.metrics)
        self.dispatcher = Dispatcher(self.index, BodyMatcher(), self.cache, metrics=self.metrics)

        self.logger.info(
            "Mock service configured",
            config_path=str(config_path),
            resource_root=str(self.cache.resource_root),
            get_rules=len(self.index.get_rules),
            post_rules=len(self.index.post_rules)
        )

        self._setup_mock_routes()

    def _setup_mock_routes(self):
        """Route every remaining GET/POST path to the dispatcher."""

        @self.app.api_route("/{path:path}", methods=["GET", "POST"], include_in_schema=False)
        async def mocked_response(request: Request, path: str):
            """Serve the configured response for this request."""
            # Metrics are labelled per configured url, never per raw path
            if self.index.lookup(request.method, request.url.path) is None:
                request.state.endpoint_label = UNMATCHED_ENDPOINT
            else:
                request.state.endpoint_label = request.url.path

            # Raw bytes, so the XML declaration decides the body's encoding
            body = await request.body()
            result = await self.dispatcher.resolve(request.method, request.url.path, body)

            if result is NOT_FOUND:
                return JSONResponse(
                    status_code=404,
                    content=ErrorResponse(
                        request_id=get_request_id(),
                        code="NOT_FOUND",
                        message="No mock configured for request",
                        details={"method": request.method, "path": request.url.path}
                    ).model_dump()
                )

            return Response(content=result, media_type=self.config.content_type)

    async def _check_dependencies(self) -> Dict[str, Any]:
        return {
            "rules": len(self.rule_set.rules),
            "get_rules": len(self.index.get_rules),
            "post_rules": len(self.index.post_rules),
        }


def create_app(settings: Optional[MockSettings] = None):
    """Create mock service application."""
    service = MockService(settings)
    return service.app


if __name__ == "__main__":
    service = MockService()
    service.run()
