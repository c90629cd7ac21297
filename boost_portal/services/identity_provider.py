from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Optional

import httpx

from boost_portal.config import settings
from boost_portal.errors import IdentityProviderConfigError, IdentityProviderError

logger = logging.getLogger("identity.clerk")


@dataclass(frozen=True)
class IdentityUser:
    id: str
    email: str


def _primary_email(payload: dict[str, Any]) -> Optional[str]:
    addresses = payload.get("email_addresses") or []
    primary_id = payload.get("primary_email_address_id")
    for address in addresses:
        if address.get("id") == primary_id:
            return address.get("email_address")
    if addresses:
        return addresses[0].get("email_address")
    return None


def _split_name(name: str) -> tuple[str, Optional[str]]:
    parts = name.strip().split(" ", 1)
    return parts[0], (parts[1] if len(parts) > 1 else None)


class ClerkAdminClient:
    """Clerk Backend API calls used for inviting team members."""

    def __init__(self, *, secret_key: str, base_url: str | None = None) -> None:
        self.secret_key = secret_key
        self.base_url = (base_url or "https://api.clerk.com/v1").rstrip("/")
        self.timeout = httpx.Timeout(15.0)

    @classmethod
    def from_settings(cls) -> "ClerkAdminClient":
        if not settings.CLERK_SECRET_KEY:
            raise IdentityProviderConfigError(
                "CLERK_SECRET_KEY is required to invite users; the identity provider is not configured.",
                setting="CLERK_SECRET_KEY",
            )
        return cls(secret_key=settings.CLERK_SECRET_KEY, base_url=settings.CLERK_API_BASE_URL)

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        headers = {"Authorization": f"Bearer {self.secret_key}"}
        try:
            response = httpx.request(method, url, params=params, json=json, headers=headers, timeout=self.timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            try:
                error_payload: Any = response.json()
            except ValueError:
                error_payload = {"text": response.text}
            if response.status_code in (401, 403):
                raise IdentityProviderConfigError(
                    "Clerk rejected the configured secret key.", setting="CLERK_SECRET_KEY"
                ) from exc
            message = f"Clerk API error ({response.status_code})."
            raise IdentityProviderError(message, status_code=response.status_code, error_payload=error_payload) from exc
        except httpx.RequestError as exc:
            raise IdentityProviderError(f"Clerk API request failed: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise IdentityProviderError("Clerk API returned a non-JSON response.") from exc

    def find_user_by_email(self, email: str) -> Optional[IdentityUser]:
        data = self._request("GET", "/users", params={"email_address": email, "limit": 1})
        users = data if isinstance(data, list) else data.get("data", [])
        if not users:
            return None
        payload = users[0]
        return IdentityUser(id=payload["id"], email=_primary_email(payload) or email)

    def create_user(self, *, email: str, name: str) -> IdentityUser:
        first_name, last_name = _split_name(name)
        payload = {
            "email_address": [email],
            "first_name": first_name,
            "last_name": last_name,
            "skip_password_requirement": True,
        }
        data = self._request("POST", "/users", json=payload)
        logger.info("Created identity provider user", extra={"clerk_user_id": data.get("id")})
        return IdentityUser(id=data["id"], email=_primary_email(data) or email)

    def send_invitation(self, *, email: str, redirect_url: str, metadata: Optional[dict[str, Any]] = None) -> dict:
        payload = {
            "email_address": email,
            "redirect_url": redirect_url,
            "public_metadata": metadata or {},
            "notify": True,
            "ignore_existing": True,
        }
        return self._request("POST", "/invitations", json=payload)
