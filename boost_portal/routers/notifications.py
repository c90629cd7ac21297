from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from boost_portal.auth.dependencies import get_current_actor
from boost_portal.db.deps import get_session
from boost_portal.db.repositories.notifications import NotificationsRepository
from boost_portal.db.repositories.users import UserProfilesRepository
from boost_portal.policy.context import Actor
from boost_portal.schemas.catalog import NotificationCreate, NotificationResponse

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _get_notification_or_404(repo: NotificationsRepository, actor: Actor, notification_id: UUID):
    notification = repo.get(actor, notification_id)
    if not notification:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    return notification


@router.get("", response_model=List[NotificationResponse])
def list_notifications(
    unread_only: bool = False,
    limit: int = 50,
    offset: int = 0,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    return NotificationsRepository(session).list(actor, unread_only=unread_only, limit=limit, offset=offset)


@router.post("", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED)
def create_notification(
    payload: NotificationCreate,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    if UserProfilesRepository(session).get_row(payload.user_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return NotificationsRepository(session).create(
        actor, user_id=payload.user_id, title=payload.title, message=payload.message
    )


@router.post("/read-all")
def mark_all_read(actor: Actor = Depends(get_current_actor), session: Session = Depends(get_session)):
    updated = NotificationsRepository(session).mark_all_read(actor)
    return {"updated": updated}


@router.post("/{notification_id}/read", response_model=NotificationResponse)
def mark_read(
    notification_id: UUID,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    repo = NotificationsRepository(session)
    notification = _get_notification_or_404(repo, actor, notification_id)
    return repo.update(actor, notification, read=True)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: UUID,
    actor: Actor = Depends(get_current_actor),
    session: Session = Depends(get_session),
):
    repo = NotificationsRepository(session)
    notification = _get_notification_or_404(repo, actor, notification_id)
    repo.delete(actor, notification)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
