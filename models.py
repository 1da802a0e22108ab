"""NextDNS-compatible request and response models.

Responses are relayed exactly as the upstream returns them; these models
describe the shapes for request parsing, defaults and the OpenAPI docs.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class Profile(BaseModel):
    """A NextDNS profile."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    fingerprint: Optional[str] = None
    name: Optional[str] = None
    security: Optional[Dict[str, Any]] = None
    privacy: Optional[Dict[str, Any]] = None
    parentalControl: Optional[Dict[str, Any]] = None
    settings: Optional[Dict[str, Any]] = None


class ListEntry(BaseModel):
    """Allowlist/denylist entry. The domain is its own identifier."""

    model_config = ConfigDict(extra="allow")

    id: str
    active: Optional[bool] = None


class ListEntryRequest(BaseModel):
    """Body of an allowlist/denylist POST.

    Either `domain` or `id` names the entry; `domain` wins when both are set.
    """

    model_config = ConfigDict(extra="allow")

    domain: Optional[str] = None
    id: Optional[str] = None

    @property
    def entry_id(self) -> Optional[str]:
        return self.domain or self.id


class DomainCount(BaseModel):
    """Per-domain query/block counters."""

    model_config = ConfigDict(extra="allow")

    domain: str
    queries: int = 0
    blocked: int = 0


class AnalyticsSnapshot(BaseModel):
    """Aggregated analytics. Defaults are the zeroed snapshot."""

    model_config = ConfigDict(extra="allow")

    queries: int = 0
    blocked: int = 0
    relayed: int = 0
    domains: List[DomainCount] = []


class LogEntry(BaseModel):
    """A single DNS query log line.

    status: 0 = blocked, 1 = allowed, 2 = relayed
    """

    model_config = ConfigDict(extra="allow")

    timestamp: str
    domain: str
    type: Optional[str] = None
    status: int
    clientId: Optional[str] = None


class ListResponse(BaseModel):
    """Allowlist/denylist entries in the `{data: [...]}` envelope."""

    data: List[ListEntry] = []


class LogsResponse(BaseModel):
    """Log entries in the `{data: [...]}` envelope."""

    data: List[LogEntry] = []


class SuccessResponse(BaseModel):
    success: bool = True


class ErrorResponse(BaseModel):
    """Body of every error response."""

    error: bool = True
    message: str
