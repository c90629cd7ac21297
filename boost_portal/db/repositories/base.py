from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from boost_portal.db.enums import OperationEnum
from boost_portal.errors import ConflictError
from boost_portal.policy.context import Actor, Resource
from boost_portal.policy.engine import authorize, can

logger = logging.getLogger(__name__)


class Repository:
    """Shared persistence helpers. Subclasses snapshot their rows for the policy engine."""

    conflict_message = "Record conflicts with an existing one"

    def __init__(self, session: Session) -> None:
        self.session = session

    def snapshot(self, obj: Any, changes: Optional[dict[str, Any]] = None) -> Resource:
        raise NotImplementedError

    def readable(self, actor: Actor, obj: Any) -> bool:
        return can(actor, OperationEnum.read, self.snapshot(obj))

    def filter_readable(self, actor: Actor, rows: list[Any]) -> list[Any]:
        return [row for row in rows if self.readable(actor, row)]

    def authorize(self, actor: Actor, operation: OperationEnum, obj: Any, changes: Optional[dict[str, Any]] = None):
        authorize(actor, operation, self.snapshot(obj, changes))

    def save(self, obj):
        self.session.add(obj)
        self.commit()
        self.session.refresh(obj)
        return obj

    def commit(self) -> None:
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            logger.info("Integrity conflict", extra={"error": str(exc.orig)})
            raise ConflictError(self.conflict_message) from exc


def changed_fields(obj: Any, fields: dict[str, Any]) -> dict[str, Any]:
    """Only the fields whose value differs from the row's current value."""
    return {key: value for key, value in fields.items() if getattr(obj, key) != value}
