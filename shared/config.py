"""
Shared configuration management for the declarative mock service.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "service_mock" / "app" / "data" / "configuration.xml"


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="MOCK_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Logging
    log_level: str = Field(default="info")

    # Transport
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=9090)


class MockSettings(BaseConfig):
    """Mock service configuration."""

    # Rule document and the directory resource locations are resolved against
    config_path: Optional[Path] = Field(default=None)
    resource_root: Optional[Path] = Field(default=None)

    # Content type written on every mocked response
    content_type: str = Field(default="text/plain; charset=utf-8")

    def resolved_config_path(self) -> Path:
        """Configured rule document, or the bundled sample."""
        return Path(self.config_path) if self.config_path else DEFAULT_CONFIG_PATH

    def resolved_resource_root(self) -> Path:
        """Configured resource root, or the rule document's directory."""
        if self.resource_root:
            return Path(self.resource_root)
        return self.resolved_config_path().parent


def get_settings(**overrides) -> MockSettings:
    """Get mock service configuration, with explicit overrides taking precedence."""
    return MockSettings(**{key: value for key, value in overrides.items() if value is not None})
