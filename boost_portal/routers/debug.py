from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from boost_portal.auth.dependencies import get_current_actor
from boost_portal.db.deps import get_session
from boost_portal.db.enums import OperationEnum
from boost_portal.policy.context import Actor
from boost_portal.services import diagnostics

router = APIRouter(prefix="/debug", tags=["debug"])


@router.get("/permissions")
def debug_permissions(actor: Actor = Depends(get_current_actor)) -> dict[str, Any]:
    return diagnostics.permissions_report(actor)


@router.get("/policies")
def debug_policies(_actor: Actor = Depends(get_current_actor)) -> list[dict[str, str]]:
    return diagnostics.policies()


@router.get("/explain/{entity}/{row_id}")
def debug_explain(
    entity: str,
    row_id: str,
    operation: OperationEnum = OperationEnum.update,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
) -> dict[str, Any]:
    return diagnostics.explain_row(session, actor, entity, row_id, operation.value)
