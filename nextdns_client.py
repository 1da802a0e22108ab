"""NextDNS API client - the only component that talks to the upstream.

The API key lives here and nowhere else; route handlers receive a client
instance and never see the credential.
"""

import logging
import urllib.parse
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from models import AnalyticsSnapshot

logger = logging.getLogger("nextdns_client")

DEFAULT_BASE_URL = "https://api.nextdns.io"

# URL segment -> profile field holding that settings group
SETTINGS_FIELDS = {
    "security": "security",
    "privacy": "privacy",
    "parental-control": "parentalControl",
}

LIST_KINDS = ("allowlist", "denylist")


class UpstreamError(Exception):
    """Error from the NextDNS API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @classmethod
    def from_http_status(cls, status_code: int, text: str) -> "UpstreamError":
        """Create error from a non-2xx upstream response."""
        return cls(f"NextDNS API error: {status_code} - {text}", status_code=status_code)

    @classmethod
    def from_connection_error(cls, message: str) -> "UpstreamError":
        """Create error from connection/timeout failure (reported as bad gateway)."""
        return cls(message, status_code=502)


@dataclass
class FetchResult:
    """Outcome of a read that falls back to a default on upstream failure."""

    data: Any
    degraded: bool = False
    error: Optional[UpstreamError] = None


def _quote(segment: str) -> str:
    return urllib.parse.quote(segment, safe="")


def _profile_body(payload: Any) -> Dict[str, Any]:
    """Return the profile object, with or without the NextDNS `data` envelope."""
    if not isinstance(payload, dict):
        return {}
    if isinstance(payload.get("data"), dict):
        return payload["data"]
    return payload


def _unwrap_data(payload: Any) -> List[Any]:
    """Extract the `data` list from a NextDNS envelope."""
    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        return payload["data"]
    return []


class NextDNSClient:
    """Proxy client for the NextDNS REST API.

    Constructed once per application and shared by all requests. Holds no
    per-request state; the API key is read-only after construction.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self._api_key = api_key or ""
        self.base_url = base_url.rstrip("/")
        if http_client is None:
            # httpx default is 5 seconds
            http_client = httpx.AsyncClient(timeout=httpx.Timeout(timeout or 5.0))
        self._client = http_client

    @property
    def has_api_key(self) -> bool:
        return bool(self._api_key)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if not self._client.is_closed:
            await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Send one request to NextDNS and return the parsed JSON body.

        Every upstream call goes through here: the API key is attached, a
        204 is an empty result, and any non-2xx status is raised as
        UpstreamError carrying the upstream status and body text.
        """
        url = f"{self.base_url}{path}"
        headers = {"X-Api-Key": self._api_key, "Content-Type": "application/json"}

        logger.debug(f"[NextDNS] {method} {path}")

        try:
            response = await self._client.request(
                method,
                url,
                headers=headers,
                json=body,
                params=params or None,
            )
        except httpx.TimeoutException as e:
            logger.error(f"[NextDNS] Request timed out: {method} {path} - {e}")
            raise UpstreamError.from_connection_error(f"NextDNS API timeout: {e}")
        except httpx.RequestError as e:
            logger.error(f"[NextDNS] Request failed: {method} {path} - {e}")
            raise UpstreamError.from_connection_error(f"NextDNS API request failed: {e}")

        if not response.is_success:
            text = response.text or "Unknown error"
            logger.error(f"[NextDNS] API error: {method} {path} - HTTP {response.status_code}")
            raise UpstreamError.from_http_status(response.status_code, text)

        if response.status_code == 204:
            return {}

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"[NextDNS] Invalid JSON: {method} {path} - {e}")
            raise UpstreamError.from_connection_error(f"NextDNS API returned invalid JSON: {e}")

    async def _fetch_or_default(self, path: str, default: Any, params: Optional[Dict[str, str]] = None) -> FetchResult:
        """GET a read-only resource, substituting `default` on any upstream failure."""
        try:
            return FetchResult(data=await self._request("GET", path, params=params))
        except UpstreamError as e:
            logger.warning(f"[NextDNS] Serving default for {path} (upstream status {e.status_code})")
            return FetchResult(data=default, degraded=True, error=e)

    # Profile

    async def get_profile(self, profile_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/profiles/{_quote(profile_id)}")

    async def update_profile(self, profile_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PATCH", f"/profiles/{_quote(profile_id)}", body=fields)

    # Settings groups

    async def get_settings_group(self, profile_id: str, field: str) -> Dict[str, Any]:
        """Return one settings group of a profile.

        Costs a full profile fetch; NextDNS has no per-group read.
        """
        profile = await self.get_profile(profile_id)
        return _profile_body(profile).get(field) or {}

    async def update_settings_group(self, profile_id: str, field: str, settings: Dict[str, Any]) -> Dict[str, Any]:
        """Replace one settings group and return it as NextDNS reports it."""
        updated = await self.update_profile(profile_id, {field: settings})
        return _profile_body(updated).get(field) or {}

    async def get_security_settings(self, profile_id: str) -> Dict[str, Any]:
        return await self.get_settings_group(profile_id, "security")

    async def update_security_settings(self, profile_id: str, settings: Dict[str, Any]) -> Dict[str, Any]:
        return await self.update_settings_group(profile_id, "security", settings)

    async def get_privacy_settings(self, profile_id: str) -> Dict[str, Any]:
        return await self.get_settings_group(profile_id, "privacy")

    async def update_privacy_settings(self, profile_id: str, settings: Dict[str, Any]) -> Dict[str, Any]:
        return await self.update_settings_group(profile_id, "privacy", settings)

    async def get_parental_control_settings(self, profile_id: str) -> Dict[str, Any]:
        return await self.get_settings_group(profile_id, "parentalControl")

    async def update_parental_control_settings(self, profile_id: str, settings: Dict[str, Any]) -> Dict[str, Any]:
        return await self.update_settings_group(profile_id, "parentalControl", settings)

    # Allowlist / denylist

    async def fetch_list(self, profile_id: str, kind: str) -> FetchResult:
        result = await self._fetch_or_default(f"/profiles/{_quote(profile_id)}/{kind}", [])
        if not result.degraded:
            result.data = _unwrap_data(result.data)
        return result

    async def get_list(self, profile_id: str, kind: str) -> List[Any]:
        """Return list entries, or [] when NextDNS cannot be reached."""
        return (await self.fetch_list(profile_id, kind)).data

    async def add_to_list(self, profile_id: str, kind: str, domain: str) -> Any:
        return await self._request("POST", f"/profiles/{_quote(profile_id)}/{kind}", body={"id": domain})

    async def remove_from_list(self, profile_id: str, kind: str, domain: str) -> None:
        await self._request("DELETE", f"/profiles/{_quote(profile_id)}/{kind}/{_quote(domain)}")

    async def get_allowlist(self, profile_id: str) -> List[Any]:
        return await self.get_list(profile_id, "allowlist")

    async def add_to_allowlist(self, profile_id: str, domain: str) -> Any:
        return await self.add_to_list(profile_id, "allowlist", domain)

    async def remove_from_allowlist(self, profile_id: str, domain: str) -> None:
        await self.remove_from_list(profile_id, "allowlist", domain)

    async def get_denylist(self, profile_id: str) -> List[Any]:
        return await self.get_list(profile_id, "denylist")

    async def add_to_denylist(self, profile_id: str, domain: str) -> Any:
        return await self.add_to_list(profile_id, "denylist", domain)

    async def remove_from_denylist(self, profile_id: str, domain: str) -> None:
        await self.remove_from_list(profile_id, "denylist", domain)

    # Analytics / logs

    async def fetch_analytics(self, profile_id: str, params: Optional[Dict[str, str]] = None) -> FetchResult:
        return await self._fetch_or_default(
            f"/profiles/{_quote(profile_id)}/analytics/status",
            AnalyticsSnapshot().model_dump(),
            params=params,
        )

    async def get_analytics(self, profile_id: str, params: Optional[Dict[str, str]] = None) -> Any:
        """Return the analytics snapshot, or the zeroed snapshot on failure."""
        return (await self.fetch_analytics(profile_id, params)).data

    async def fetch_logs(self, profile_id: str, params: Optional[Dict[str, str]] = None) -> FetchResult:
        result = await self._fetch_or_default(f"/profiles/{_quote(profile_id)}/logs", [], params=params)
        if not result.degraded:
            result.data = _unwrap_data(result.data)
        return result

    async def get_logs(self, profile_id: str, params: Optional[Dict[str, str]] = None) -> List[Any]:
        """Return log entries, or [] on failure."""
        return (await self.fetch_logs(profile_id, params)).data
