"""
Notification inbox routes
"""
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from app.config.database import get_db
from app.api.dependencies import get_current_actor
from app.schemas.actor import Actor
from app.services.notification.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["dashboard-notifications"])


class NotificationReadUpdate(BaseModel):
    read: bool = True


@router.get("")
async def list_notifications(
        limit: int = Query(20, ge=1, le=100),
        offset: int = Query(0, ge=0),
        read: Optional[bool] = Query(None, description="Filter by read state"),
        actor: Actor = Depends(get_current_actor),
        db: Session = Depends(get_db)
):
    return NotificationService.list_notifications(db, actor, limit=limit, offset=offset, read=read)


@router.get("/unread-count")
async def get_unread_count(
        actor: Actor = Depends(get_current_actor),
        db: Session = Depends(get_db)
):
    return {"count": NotificationService.unread_count(db, actor)}


@router.patch("/{notification_id}/read")
async def mark_notification_read(
        notification_id: UUID,
        data: Optional[NotificationReadUpdate] = None,
        actor: Actor = Depends(get_current_actor),
        db: Session = Depends(get_db)
):
    notification = NotificationService.mark_read(db, actor, notification_id, read=data.read if data else True)
    return {"success": True, "notification": notification.to_dict()}


@router.post("/read-all")
async def mark_all_notifications_read(
        actor: Actor = Depends(get_current_actor),
        db: Session = Depends(get_db)
):
    count = NotificationService.mark_all_read(db, actor)
    return {"success": True, "updated": count}


@router.delete("/{notification_id}")
async def delete_notification(
        notification_id: UUID,
        actor: Actor = Depends(get_current_actor),
        db: Session = Depends(get_db)
):
    NotificationService.delete_notification(db, actor, notification_id)
    return {"success": True, "message": "Notification deleted."}
