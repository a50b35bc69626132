"""
Notification fan-out and inbox operations.

`fan_out` only inserts rows; callers that need all-or-nothing semantics
wrap it in the same `transaction.atomic()` block as the action that
triggered it.
"""

import logging

from ..errors import ApiError, ErrorCode
from ..models import Notification, NotificationType

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 50


def message_preview(sender, content):
    preview = content[:PREVIEW_LENGTH]
    if len(content) > PREVIEW_LENGTH:
        preview += "..."
    return f"@{sender.username}: {preview}"


class NotificationService:

    def fan_out(self, actor, recipients, type, title, message, data=None, conversation=None):
        """Insert one notification per recipient (the actor is never notified)."""
        rows = [
            Notification(
                user=recipient,
                actor=actor,
                type=type,
                title=title,
                message=message,
                data=data or {},
                conversation=conversation,
            )
            for recipient in recipients
            if actor is None or recipient.pk != actor.pk
        ]
        created = Notification.objects.bulk_create(rows)
        logger.debug(f"Fan-out {type}: {len(created)} notification(s) from {actor}")
        return created

    def notify(self, actor, recipient, type, title, message, data=None, conversation=None):
        created = self.fan_out(actor, [recipient], type, title, message, data, conversation)
        return created[0] if created else None

    def new_message(self, message, recipients):
        return self.fan_out(
            actor=message.sender,
            recipients=recipients,
            type=NotificationType.NEW_MESSAGE,
            title="New Message",
            message=message_preview(message.sender, message.content),
            data={
                "conversationId": message.conversation_id,
                "messageId": message.id,
                "senderUsername": message.sender.username,
            },
            conversation=message.conversation,
        )

    # ------------------------------------------------------------------
    # Inbox
    # ------------------------------------------------------------------

    def list_for(self, user, include_read=False, limit=10):
        qs = user.notifications.select_related('actor')
        if not include_read:
            qs = qs.unread()
        return list(qs[:limit])

    def unread_count(self, user):
        return user.notifications.unread().count()

    def mark_read(self, user, ids=None, mark_all=False):
        if mark_all:
            updated = user.notifications.mark_all_as_read()
        elif ids:
            updated = user.notifications.unread().filter(id__in=ids).update(is_read=True)
        else:
            updated = 0
        logger.info(f"Marked {updated} notification(s) read for {user.username}")
        return updated

    def mark_one(self, user, notification_id):
        try:
            notification = user.notifications.get(id=notification_id)
        except Notification.DoesNotExist:
            raise ApiError(ErrorCode.NOTIFICATION_NOT_FOUND, "Notification not found")
        if not notification.is_read:
            notification.is_read = True
            notification.save(update_fields=['is_read'])
        return notification
