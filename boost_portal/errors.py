from __future__ import annotations

from typing import Any, Optional


class PermissionDeniedError(RuntimeError):
    """No rule allowed the operation; carries what was evaluated so denials can be debugged."""

    def __init__(
        self,
        message: str,
        *,
        entity: str,
        operation: str,
        rules: Optional[list[dict[str, Any]]] = None,
        actor: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.entity = entity
        self.operation = operation
        self.rules = rules or []
        self.actor = actor or {}

    def to_payload(self) -> dict[str, Any]:
        return {
            "detail": str(self),
            "entity": self.entity,
            "operation": self.operation,
            "rules": self.rules,
            "actor": self.actor,
        }


class InvalidRequestError(ValueError):
    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class ConflictError(RuntimeError):
    pass


class LastAdminError(ConflictError):
    pass


class NotFoundError(LookupError):
    pass


class IdentityProviderConfigError(RuntimeError):
    def __init__(self, message: str, setting: Optional[str] = None) -> None:
        super().__init__(message)
        self.setting = setting


class IdentityProviderError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None, error_payload: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_payload = error_payload
