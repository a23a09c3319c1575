"""Notification delivery and the per-user inbox."""
import uuid

import pytest

from app.core.exceptions import NotFoundError, PermissionDeniedError
from app.models import Notification, NotificationType
from app.services.notification.notification_service import NotificationService
from app.services.notification.publisher import NotificationPublisher


@pytest.fixture
def deliver(notifier, organization):
    async def _deliver(user, title="Hello"):
        return await notifier.notify_user(
            user.id, organization.id, None, NotificationType.APPOINTMENT_CONFIRMED, title, "Message body"
        )

    return _deliver


class TestDelivery:

    @pytest.mark.asyncio
    async def test_notify_organization_reaches_owner_and_members(self, db, organization, owner, member,
                                                                 notifier, publisher):
        notifications = await notifier.notify_organization(
            organization.id, None, NotificationType.APPOINTMENT_CREATED, "New", "Someone booked"
        )

        assert [n.user_id for n in notifications] == [owner.id, member.id]
        assert all(n.read is False for n in notifications)
        event = publisher.events_for(owner.id)[0]
        assert event["event"] == "notification.created"
        assert event["type"] == "APPOINTMENT_CREATED"
        assert event["organization_id"] == str(organization.id)

    @pytest.mark.asyncio
    async def test_owner_listed_as_member_is_notified_once(self, db, organization, owner, notifier):
        organization.members.append(owner)
        db.commit()

        notifications = await notifier.notify_organization(
            organization.id, None, NotificationType.APPOINTMENT_CREATED, "New", "Someone booked"
        )

        assert [n.user_id for n in notifications].count(owner.id) == 1

    @pytest.mark.asyncio
    async def test_unknown_organization(self, notifier):
        with pytest.raises(NotFoundError):
            await notifier.notify_organization(
                uuid.uuid4(), None, NotificationType.APPOINTMENT_CREATED, "New", "Someone booked"
            )

    @pytest.mark.asyncio
    async def test_delivery_without_publisher_only_stores(self, db, organization, customer):
        service = NotificationService(db)

        notification = await service.notify_user(
            customer.id, organization.id, None, NotificationType.APPOINTMENT_CANCELLED, "Cancelled", "Sorry"
        )

        assert db.query(Notification).filter(Notification.id == notification.id).count() == 1


class TestPublisher:

    @pytest.mark.asyncio
    async def test_disconnected_publisher_is_a_no_op(self):
        publisher = NotificationPublisher(url="redis://localhost:6379/15")

        assert publisher.connected is False
        assert await publisher.publish_to_user(uuid.uuid4(), {"event": "x"}) == 0
        assert await publisher.ping() is False

    @pytest.mark.asyncio
    async def test_publishes_on_user_channel(self):
        published = []

        class _Client:
            async def publish(self, channel, message):
                published.append((channel, message))
                return 1

        user_id = uuid.uuid4()
        publisher = NotificationPublisher(client=_Client())

        receivers = await publisher.publish_to_user(user_id, {"event": "notification.created"})

        assert receivers == 1
        assert published == [(f"notifications:{user_id}", '{"event": "notification.created"}')]


class TestInbox:

    @pytest.mark.asyncio
    async def test_list_paginates_and_counts_unread(self, db, customer, actor_for, deliver):
        for i in range(3):
            await deliver(customer, title=f"n{i}")

        page = NotificationService.list_notifications(db, actor_for(customer), limit=2, offset=0)

        assert page["total"] == 3
        assert page["unread_count"] == 3
        assert page["has_more"] is True
        assert len(page["notifications"]) == 2

    @pytest.mark.asyncio
    async def test_list_filters_by_read_state(self, db, customer, actor_for, deliver):
        first = await deliver(customer)
        await deliver(customer)
        NotificationService.mark_read(db, actor_for(customer), first.id)

        unread = NotificationService.list_notifications(db, actor_for(customer), read=False)
        read = NotificationService.list_notifications(db, actor_for(customer), read=True)

        assert unread["total"] == 1
        assert read["total"] == 1
        assert read["notifications"][0]["id"] == str(first.id)

    @pytest.mark.asyncio
    async def test_mark_read_and_unread(self, db, customer, actor_for, deliver):
        notification = await deliver(customer)

        marked = NotificationService.mark_read(db, actor_for(customer), notification.id)
        assert marked.read is True
        assert marked.read_at is not None

        unmarked = NotificationService.mark_read(db, actor_for(customer), notification.id, read=False)
        assert unmarked.read is False
        assert unmarked.read_at is None

    @pytest.mark.asyncio
    async def test_cannot_touch_someone_elses_notification(self, db, customer, owner, actor_for, deliver):
        notification = await deliver(customer)

        with pytest.raises(PermissionDeniedError):
            NotificationService.mark_read(db, actor_for(owner), notification.id)
        with pytest.raises(PermissionDeniedError):
            NotificationService.delete_notification(db, actor_for(owner), notification.id)

    def test_unknown_notification(self, db, customer, actor_for):
        with pytest.raises(NotFoundError):
            NotificationService.mark_read(db, actor_for(customer), uuid.uuid4())

    @pytest.mark.asyncio
    async def test_mark_all_read_only_touches_own(self, db, customer, owner, actor_for, deliver):
        await deliver(customer)
        await deliver(customer)
        await deliver(owner)

        updated = NotificationService.mark_all_read(db, actor_for(customer))

        assert updated == 2
        assert NotificationService.unread_count(db, actor_for(customer)) == 0
        assert NotificationService.unread_count(db, actor_for(owner)) == 1

    @pytest.mark.asyncio
    async def test_delete(self, db, customer, actor_for, deliver):
        notification = await deliver(customer)

        NotificationService.delete_notification(db, actor_for(customer), notification.id)

        assert db.query(Notification).count() == 0

    def test_anonymous_has_no_inbox(self, db, anonymous):
        with pytest.raises(PermissionDeniedError):
            NotificationService.list_notifications(db, anonymous)
