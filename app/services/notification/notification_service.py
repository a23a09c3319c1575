# app/services/notification/notification_service.py
"""In-app notifications: storage, real-time publish and the user inbox"""
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, PermissionDeniedError
from app.models.notification import Notification, NotificationType
from app.models.organization import Organization
from app.schemas.actor import Actor
from app.services.notification.publisher import NotificationPublisher
from app.services.organization.organization_service import OrganizationService

logger = logging.getLogger(__name__)


class NotificationService:
    """
    Delivery side (notify_organization / notify_user) writes one row per
    recipient and publishes a real-time event; errors propagate so the
    calling service decides whether to swallow them.
    """

    def __init__(self, db: Session, publisher: Optional[NotificationPublisher] = None):
        self.db = db
        self.publisher = publisher

    async def notify_organization(
            self,
            organization_id: UUID,
            appointment_id: Optional[UUID],
            type: NotificationType,
            title: str,
            message: str
    ) -> List[Notification]:
        """Notify the organization owner and every member"""
        organization = self.db.query(Organization).filter(Organization.id == organization_id).first()
        if not organization:
            raise NotFoundError("Organization not found!")

        return await self._deliver(
            organization.recipient_ids(), organization_id, appointment_id, type, title, message
        )

    async def notify_user(
            self,
            user_id: UUID,
            organization_id: UUID,
            appointment_id: Optional[UUID],
            type: NotificationType,
            title: str,
            message: str
    ) -> Notification:
        notifications = await self._deliver(
            [user_id], organization_id, appointment_id, type, title, message
        )
        return notifications[0]

    async def _deliver(
            self,
            recipient_ids: Iterable[UUID],
            organization_id: UUID,
            appointment_id: Optional[UUID],
            type: NotificationType,
            title: str,
            message: str
    ) -> List[Notification]:
        notifications = [
            Notification(
                user_id=user_id,
                organization_id=organization_id,
                appointment_id=appointment_id,
                type=type,
                title=title,
                message=message,
                read=False,
            )
            for user_id in recipient_ids
        ]
        if not notifications:
            return []

        try:
            self.db.add_all(notifications)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        if self.publisher is not None:
            for notification in notifications:
                await self.publisher.publish_to_user(notification.user_id, {
                    "event": "notification.created",
                    "id": str(notification.id),
                    "type": type.value,
                    "title": title,
                    "organization_id": str(organization_id),
                    "appointment_id": str(appointment_id) if appointment_id else None,
                })

        logger.info(f"Delivered {type.value} notification to {len(notifications)} recipient(s)")
        return notifications

    # ========== INBOX ==========

    @staticmethod
    def list_notifications(
            db: Session,
            actor: Actor,
            limit: int = 20,
            offset: int = 0,
            read: Optional[bool] = None
    ) -> Dict:
        OrganizationService.require_authenticated(actor)

        query = db.query(Notification).filter(Notification.user_id == actor.id)
        if read is not None:
            query = query.filter(Notification.read == read)

        total = query.count()
        notifications = query.order_by(
            Notification.created_at.desc()
        ).offset(offset).limit(limit).all()

        return {
            "notifications": [n.to_dict() for n in notifications],
            "total": total,
            "unread_count": NotificationService.unread_count(db, actor),
            "has_more": offset + limit < total,
        }

    @staticmethod
    def unread_count(db: Session, actor: Actor) -> int:
        OrganizationService.require_authenticated(actor)
        return db.query(Notification).filter(
            Notification.user_id == actor.id,
            Notification.read == False
        ).count()

    @staticmethod
    def _get_own_notification(db: Session, actor: Actor, notification_id: UUID) -> Notification:
        OrganizationService.require_authenticated(actor)
        notification = db.query(Notification).filter(Notification.id == notification_id).first()
        if not notification:
            raise NotFoundError("Notification not found!")
        if notification.user_id != actor.id:
            raise PermissionDeniedError("Forbidden")
        return notification

    @staticmethod
    def mark_read(db: Session, actor: Actor, notification_id: UUID, read: bool = True) -> Notification:
        notification = NotificationService._get_own_notification(db, actor, notification_id)
        notification.read = read
        notification.read_at = datetime.now(timezone.utc) if read else None
        db.commit()
        db.refresh(notification)
        return notification

    @staticmethod
    def mark_all_read(db: Session, actor: Actor) -> int:
        OrganizationService.require_authenticated(actor)
        count = db.query(Notification).filter(
            Notification.user_id == actor.id,
            Notification.read == False
        ).update({"read": True, "read_at": datetime.now(timezone.utc)}, synchronize_session=False)
        db.commit()
        return count

    @staticmethod
    def delete_notification(db: Session, actor: Actor, notification_id: UUID) -> None:
        notification = NotificationService._get_own_notification(db, actor, notification_id)
        db.delete(notification)
        db.commit()
