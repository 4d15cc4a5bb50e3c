"""
Rule data models for the mock service.

The rule tree is immutable once loaded; cached response content lives in
the resource cache, never on these models.
"""

from typing import Dict, Mapping, Optional, Tuple
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class HttpMethod(str, Enum):
    """Supported HTTP methods."""
    GET = "GET"
    POST = "POST"


class Resource(BaseModel):
    """Response payload descriptor."""
    model_config = ConfigDict(frozen=True)

    location: str = Field(..., min_length=1, description="Location of the response content")
    delay_ms: int = Field(0, ge=0, description="Artificial delay applied on every read")


class ResponseGroup(BaseModel):
    """One branch of a POST rule; no condition means catch-all."""
    model_config = ConfigDict(frozen=True)

    condition: Optional[str] = Field(None, description="XPath expression evaluated against the body")
    response: Resource

    @field_validator("condition")
    @classmethod
    def blank_condition_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()

    @property
    def is_conditional(self) -> bool:
        return self.condition is not None


class Rule(BaseModel):
    """Routing entry: method + url to one or more candidate responses."""
    model_config = ConfigDict(frozen=True)

    method: HttpMethod
    url: str = Field(..., min_length=1)
    simple_response: Optional[Resource] = None
    groups: Tuple[ResponseGroup, ...] = ()
    namespaces: Tuple[Tuple[str, str], ...] = ()

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("namespaces", mode="before")
    @classmethod
    def freeze_namespaces(cls, value):
        if isinstance(value, Mapping):
            return tuple(sorted(value.items()))
        return value

    @property
    def namespace_map(self) -> Dict[str, str]:
        """Prefix to URI bindings, as a fresh dict."""
        return dict(self.namespaces)

    @model_validator(mode="after")
    def check_responses(self) -> "Rule":
        if self.method == HttpMethod.GET:
            if self.simple_response is None:
                raise ValueError(f"GET rule for '{self.url}' requires a resource")
            if self.groups:
                raise ValueError(f"GET rule for '{self.url}' cannot declare resource groups")
        elif self.simple_response is None and not self.groups:
            raise ValueError(f"POST rule for '{self.url}' requires a resource or resource groups")
        return self

    def shadowing_group_index(self) -> Optional[int]:
        """Index of the first unconditional group that is not the last group, if any."""
        for index, group in enumerate(self.groups[:-1]):
            if not group.is_conditional:
                return index
        return None


class RuleSet(BaseModel):
    """Full loaded configuration, in declaration order."""
    model_config = ConfigDict(frozen=True)

    rules: Tuple[Rule, ...] = ()
