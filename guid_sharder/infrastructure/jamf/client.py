# guid_sharder/infrastructure/jamf/client.py

import asyncio
import logging
import time
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from guid_sharder.application.exceptions import InventoryFetchError
from guid_sharder.config.settings import ShardSettings
from guid_sharder.domain.models.shard import SourceType

logger = logging.getLogger(__name__)

OAUTH_TOKEN_PATH = "/api/oauth/token"
BASIC_TOKEN_PATH = "/api/v1/auth/token"
COMPUTERS_INVENTORY_PATH = "/api/v1/computers-inventory"
MOBILE_DEVICES_PATH = "/JSSResource/mobiledevices"
COMPUTER_GROUP_PATH = "/JSSResource/computergroups/id/{group_id}"
MOBILE_DEVICE_GROUP_PATH = "/JSSResource/mobiledevicegroups/id/{group_id}"
USERS_PATH = "/JSSResource/users"

PAGE_SIZE = 200
BASIC_TOKEN_FALLBACK_TTL = 20 * 60
RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})
RETRY_BASE_DELAY_SECONDS = 0.5
RETRY_MAX_DELAY_SECONDS = 8.0


def base_url_for(instance_domain: str) -> str:
    """company.jamfcloud.com -> https://company.jamfcloud.com; explicit schemes are kept."""
    domain = instance_domain.strip().rstrip("/")
    if domain.startswith(("http://", "https://")):
        return domain
    return f"https://{domain}"


def retry_delay(attempt: int, floor_seconds: float = 0.0, retry_after: Optional[str] = None) -> float:
    """
    Seconds to wait after failed attempt number attempt (1-based).
    Bounded exponential backoff, never below floor_seconds, stretched to a
    numeric Retry-After when the server sends one.
    """
    delay = min(RETRY_BASE_DELAY_SECONDS * (2 ** (attempt - 1)), RETRY_MAX_DELAY_SECONDS)
    delay = max(delay, floor_seconds)
    if retry_after:
        try:
            delay = max(delay, float(retry_after))
        except ValueError:
            logger.debug("retry_after_unparseable", extra={"retry_after": retry_after})
    return delay


def _parse_expiry(value: Optional[str]) -> float:
    if value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp()
        except ValueError:
            logger.debug("token_expiry_unparseable", extra={"expires": value})
    return time.time() + BASIC_TOKEN_FALLBACK_TTL


class JamfProClient:
    """
    Read-only Jamf Pro client listing device and user IDs.
    Bearer tokens are cached and refreshed token_refresh_buffer_period_seconds
    before they expire. Transport errors, 429 and 5xx are retried up to
    max_retry_attempts times.
    """

    def __init__(
        self,
        settings: ShardSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._settings = settings
        self._sleep = sleep
        self._client = httpx.AsyncClient(
            base_url=base_url_for(settings.instance_domain),
            timeout=settings.custom_timeout_seconds,
            follow_redirects=settings.follow_redirects,
            max_redirects=settings.max_redirects,
            headers={"Accept": "application/json"},
            transport=transport,
        )
        self._token: Optional[str] = None
        self._token_expires_at = 0.0

    async def __aenter__(self) -> "JamfProClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def _token_is_fresh(self) -> bool:
        buffer = self._settings.token_refresh_buffer_period_seconds
        return self._token is not None and time.time() < self._token_expires_at - buffer

    async def _authenticate(self) -> None:
        s = self._settings
        try:
            if s.auth_method == "basic":
                response = await self._client.post(
                    BASIC_TOKEN_PATH, auth=(s.basic_auth_username, s.basic_auth_password)
                )
                response.raise_for_status()
                body = response.json()
                self._token = body["token"]
                self._token_expires_at = _parse_expiry(body.get("expires"))
            else:
                response = await self._client.post(
                    OAUTH_TOKEN_PATH,
                    data={
                        "grant_type": "client_credentials",
                        "client_id": s.client_id,
                        "client_secret": s.client_secret,
                    },
                )
                response.raise_for_status()
                body = response.json()
                self._token = body["access_token"]
                self._token_expires_at = time.time() + float(body.get("expires_in", 0))
        except (httpx.HTTPError, KeyError, ValueError) as e:
            raise InventoryFetchError(f"Jamf Pro authentication ({s.auth_method}) failed: {e}") from e
        logger.debug("token_acquired", extra={"auth_method": s.auth_method})

    async def _auth_headers(self) -> Dict[str, str]:
        if not self._token_is_fresh():
            await self._authenticate()
        return {"Authorization": f"Bearer {self._token}"}

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET with retries and backoff between attempts.
        Raises InventoryFetchError once attempts are exhausted.
        """
        attempts = self._settings.max_retry_attempts + 1
        floor = self._settings.mandatory_request_delay_milliseconds / 1000
        last_error = ""

        for attempt in range(1, attempts + 1):
            retry_after = None
            headers = await self._auth_headers()
            try:
                response = await self._client.get(path, params=params, headers=headers)
            except httpx.TransportError as e:
                last_error = f"{type(e).__name__}: {e}"
            else:
                if response.status_code == 401:
                    self._token = None
                    last_error = "401 Unauthorized"
                elif response.status_code in RETRYABLE_STATUS:
                    last_error = f"HTTP {response.status_code}"
                    if response.status_code == 429:
                        retry_after = response.headers.get("Retry-After")
                elif response.is_error:
                    raise InventoryFetchError(f"GET {path} failed with HTTP {response.status_code}")
                else:
                    try:
                        return response.json()
                    except ValueError as e:
                        raise InventoryFetchError(f"GET {path} returned invalid JSON") from e

            logger.warning("jamf_request_retry", extra={"path": path, "attempt": attempt, "error": last_error})
            if attempt < attempts:
                await self._sleep(retry_delay(attempt, floor, retry_after))

        raise InventoryFetchError(f"GET {path} failed after {attempts} attempt(s): {last_error}")

    # ------------------------------------------------------------------
    # Sources
    # ------------------------------------------------------------------

    async def fetch_ids(self, source_type: str, group_id: str = "") -> List[str]:
        """
        Dispatch on source_type. Unknown source types and payloads that do not
        have the expected shape raise InventoryFetchError.
        """
        try:
            return await self._fetch_source(source_type, group_id)
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise InventoryFetchError(
                f"unexpected Jamf Pro response for source_type {source_type}: {type(e).__name__}: {e}"
            ) from e

    async def _fetch_source(self, source_type: str, group_id: str) -> List[str]:
        if source_type == SourceType.COMPUTER_INVENTORY.value:
            return await self.fetch_computer_inventory()
        if source_type == SourceType.MOBILE_DEVICE_INVENTORY.value:
            return await self.fetch_mobile_device_inventory()
        if source_type == SourceType.COMPUTER_GROUP_MEMBERSHIP.value:
            return await self.fetch_computer_group_members(group_id)
        if source_type == SourceType.MOBILE_DEVICE_GROUP_MEMBERSHIP.value:
            return await self.fetch_mobile_device_group_members(group_id)
        if source_type == SourceType.USER_ACCOUNTS.value:
            return await self.fetch_users()
        raise InventoryFetchError(f"unknown source_type: {source_type}")

    async def fetch_computer_inventory(self) -> List[str]:
        """Managed computers only; unmanaged ones cannot join static groups."""
        ids: List[str] = []
        page = 0
        while True:
            body = await self._get_json(
                COMPUTERS_INVENTORY_PATH,
                params={"section": "GENERAL", "page": page, "page-size": PAGE_SIZE},
            )
            results = body.get("results") or []
            for computer in results:
                managed = ((computer.get("general") or {}).get("remoteManagement") or {}).get("managed")
                if managed:
                    ids.append(str(computer["id"]))
            page += 1
            if not results or page * PAGE_SIZE >= int(body.get("totalCount", 0)):
                break
        return ids

    async def fetch_mobile_device_inventory(self) -> List[str]:
        """Managed mobile devices only."""
        body = await self._get_json(MOBILE_DEVICES_PATH)
        return [str(d["id"]) for d in body.get("mobile_devices") or [] if d.get("managed")]

    async def fetch_computer_group_members(self, group_id: str) -> List[str]:
        body = await self._get_json(COMPUTER_GROUP_PATH.format(group_id=group_id))
        group = body.get("computer_group") or {}
        return [str(c["id"]) for c in group.get("computers") or []]

    async def fetch_mobile_device_group_members(self, group_id: str) -> List[str]:
        body = await self._get_json(MOBILE_DEVICE_GROUP_PATH.format(group_id=group_id))
        group = body.get("mobile_device_group") or {}
        return [str(d["id"]) for d in group.get("mobile_devices") or []]

    async def fetch_users(self) -> List[str]:
        body = await self._get_json(USERS_PATH)
        return [str(u["id"]) for u in body.get("users") or []]
