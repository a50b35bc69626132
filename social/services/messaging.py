"""
================================================================================
ARENA SOCIAL - MESSAGE APPEND & HISTORY
================================================================================

SEND FLOW
================================================================================
1. Validate input (receiver handle, content or image, image host)
2. Resolve receiver, apply the relationship gate
   (by conversation id: check membership, and apply the gate to the
   other member of a direct conversation)
3. Find or create the direct conversation
4. In ONE transaction:
   - insert the message
   - bump the conversation's updated_at to the message timestamp
   - insert one NEW_MESSAGE notification per other member
5. Return the message with the sender's public fields

Steps 3 and 4 are separate transactions: if step 4 fails the (empty)
conversation stays, and nothing else is rolled back.
================================================================================
"""

import logging

from django.db import DatabaseError, transaction
from django.utils import timezone

from ..errors import ApiError, ErrorCode
from ..models import Message
from ..validation import clean_content, clean_id, clean_receiver_username
from .users import find_by_handle

logger = logging.getLogger(__name__)


class MessageService:
    """
    Args:
        conversations: ConversationService
        relationships: RelationshipService (messaging gate)
        notifications: NotificationService (fan-out)
        media: MediaService (image URL checks)
        paginator: CursorPaginator for message history
    """

    def __init__(self, conversations, relationships, notifications, media, paginator):
        self.conversations = conversations
        self.relationships = relationships
        self.notifications = notifications
        self.media = media
        self.paginator = paginator

    # ========================================================================
    # SEND
    # ========================================================================

    def send(self, sender, content, receiver_username=None, conversation_id=None, image_url=None):
        """
        Append a message to a direct conversation (by receiver handle) or to
        an existing conversation (by id).

        Returns:
            tuple: (message, conversation)

        Raises:
            ApiError: INVALID_USERNAME, EMPTY_CONTENT, VALIDATION_ERROR,
                SENDER_NOT_FOUND, RECEIVER_NOT_FOUND, INVALID_OPERATION,
                FORBIDDEN, CONVERSATION_NOT_FOUND, NOT_PARTICIPANT,
                SEND_FAILED
        """
        if conversation_id is None:
            receiver_username = clean_receiver_username(receiver_username)
        else:
            conversation_id = clean_id(conversation_id, "conversationId")
        image_url = self.media.validate_image_url(image_url)
        text = clean_content(content, image_url)

        if sender is None or not sender.pk:
            raise ApiError(ErrorCode.SENDER_NOT_FOUND, "Sender profile not found")

        if conversation_id is not None:
            conversation, _ = self.conversations.require_member(sender, conversation_id)
            if not conversation.is_group:
                other = conversation.members.exclude(user=sender).select_related('user').first()
                if other is None:
                    raise ApiError(ErrorCode.RECEIVER_NOT_FOUND, "Conversation has no other participant")
                self.relationships.evaluate(sender, other.user)
        else:
            receiver = find_by_handle(receiver_username)
            if receiver is None:
                raise ApiError(ErrorCode.RECEIVER_NOT_FOUND, f"User @{receiver_username} not found")

            self.relationships.evaluate(sender, receiver)
            try:
                conversation, _ = self.conversations.resolve_direct(sender, receiver)
            except DatabaseError as e:
                logger.error(f"Conversation lookup failed for {sender.username} -> {receiver.username}: {e}",
                             exc_info=True)
                raise ApiError(ErrorCode.SEND_FAILED, "Failed to send message")

        try:
            message = self._append(conversation, sender, text, image_url)
        except DatabaseError as e:
            logger.error(f"Message insert failed in conversation {conversation.id}: {e}", exc_info=True)
            raise ApiError(ErrorCode.SEND_FAILED, "Failed to send message")

        logger.info(f"{sender.username} sent message {message.id} in conversation {conversation.id}")
        return message, conversation

    def _append(self, conversation, sender, text, image_url):
        with transaction.atomic():
            now = timezone.now()
            message = Message.objects.create(
                conversation=conversation,
                sender=sender,
                content=text,
                image_url=image_url,
                timestamp=now,
            )
            self.conversations.touch(conversation, now)

            recipients = [
                m.user for m in conversation.members.select_related('user').exclude(user=sender)
            ]
            self.notifications.new_message(message, recipients)
        return message

    # ========================================================================
    # HISTORY
    # ========================================================================

    def list_messages(self, user, conversation_id, cursor=None, limit=None):
        conversation, _ = self.conversations.require_member(user, conversation_id)
        qs = conversation.messages.filter(is_deleted=False).select_related('sender')
        # a cursor message deleted since the last fetch still marks the position
        return self.paginator.paginate(qs, cursor, limit, time_field='timestamp',
                                       anchor_queryset=conversation.messages.all())

    def latest_message(self, user, conversation_id):
        conversation, _ = self.conversations.require_member(user, conversation_id)
        return conversation.messages.filter(is_deleted=False).select_related('sender').first()

    def mark_read(self, user, conversation_id):
        """Move the member's read marker to now; returns how many messages became read."""
        conversation, membership = self.conversations.require_member(user, conversation_id)
        unread = conversation.messages.filter(is_deleted=False).exclude(sender=user)
        if membership.last_read_at:
            unread = unread.filter(timestamp__gt=membership.last_read_at)
        count = unread.count()

        membership.last_read_at = timezone.now()
        membership.save(update_fields=['last_read_at'])
        return count

    def delete_message(self, user, message_id):
        message = Message.objects.filter(pk=message_id, is_deleted=False).first()
        if message is None:
            raise ApiError(ErrorCode.MESSAGE_NOT_FOUND, "Message not found")
        if message.sender_id != user.pk:
            raise ApiError(ErrorCode.NOT_MESSAGE_OWNER, "You can only delete your own messages")

        message.is_deleted = True
        message.deleted_at = timezone.now()
        message.save(update_fields=['is_deleted', 'deleted_at'])
        logger.info(f"{user.username} deleted message {message.id}")
        return message
