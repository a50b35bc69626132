"""
================================================================================
ARENA SOCIAL - CONVERSATION RESOLVER
================================================================================

Finds or creates conversations and answers membership questions.

DIRECT CONVERSATIONS
================================================================================
Exactly one direct conversation exists per unordered pair of users. The
pair is stored as `pair_key` ("<low id>:<high id>") under a UNIQUE
constraint, and creation goes through `get_or_create`, so a request that
loses a creation race re-reads the winner's row instead of inserting a
duplicate.

GROUP CONVERSATIONS
================================================================================
A group needs a name, its creator and at least two other members. Creating
a group whose name and member set match an existing group returns that
group instead (created=False). The creator is the first admin; admins can
rename the group and add or remove members.
================================================================================
"""

import logging

from django.db import transaction
from django.db.models import Count
from django.utils import timezone

from ..errors import ApiError, ErrorCode
from ..models import Conversation, ConversationMember, make_pair_key
from ..validation import clean_group_name, clean_handle, clean_participants, MIN_GROUP_OTHERS
from .users import find_by_handle, find_many_by_handles

logger = logging.getLogger(__name__)


class ConversationService:
    """
    Args:
        paginator: CursorPaginator for the conversation list
        media: MediaService, validates group avatar URLs
    """

    def __init__(self, paginator, media):
        self.paginator = paginator
        self.media = media

    # ========================================================================
    # DIRECT CONVERSATIONS
    # ========================================================================

    def find_direct(self, a, b):
        return Conversation.objects.filter(pair_key=make_pair_key(a.pk, b.pk)).first()

    def resolve_direct(self, sender, receiver):
        """
        Return (conversation, created) for the pair, creating it with both
        members when absent.
        """
        if sender.pk == receiver.pk:
            raise ApiError(ErrorCode.INVALID_OPERATION, "Cannot start a conversation with yourself")

        key = make_pair_key(sender.pk, receiver.pk)
        with transaction.atomic():
            conversation, created = Conversation.objects.get_or_create(
                pair_key=key,
                defaults={'created_by': sender, 'is_group': False},
            )
            if created:
                ConversationMember.objects.bulk_create([
                    ConversationMember(conversation=conversation, user=sender),
                    ConversationMember(conversation=conversation, user=receiver),
                ])

        if created:
            logger.info(f"Created conversation {conversation.id} for {sender.username} and {receiver.username}")
        return conversation, created

    # ========================================================================
    # GROUPS
    # ========================================================================

    def find_group(self, name, member_ids):
        """Existing group with exactly this name and member set, if any."""
        wanted = set(member_ids)
        candidates = (
            Conversation.objects
            .filter(is_group=True, name=name)
            .annotate(member_count=Count('members'))
            .filter(member_count=len(wanted))
            .prefetch_related('members')
        )
        for conversation in candidates:
            if {m.user_id for m in conversation.members.all()} == wanted:
                return conversation
        return None

    def create_group(self, creator, name, usernames, description="", avatar_url=""):
        name = clean_group_name(name)
        handles = clean_participants(usernames, exclude=creator.username)
        avatar_url = self.media.validate_image_url(avatar_url)
        description = (description or "").strip()

        others, missing = find_many_by_handles(handles)
        if missing:
            raise ApiError(ErrorCode.USER_NOT_FOUND, "Some users not found", details={"missing": missing})

        member_ids = [creator.pk] + [u.pk for u in others]

        existing = self.find_group(name, member_ids)
        if existing is not None:
            logger.info(f"Group '{name}' already exists as conversation {existing.id}")
            return existing, False

        with transaction.atomic():
            conversation = Conversation.objects.create(
                name=name,
                description=description,
                avatar_url=avatar_url,
                is_group=True,
                created_by=creator,
            )
            ConversationMember.objects.bulk_create(
                [ConversationMember(conversation=conversation, user=creator, is_admin=True)] +
                [ConversationMember(conversation=conversation, user=u) for u in others]
            )

        logger.info(f"{creator.username} created group '{name}' ({conversation.id}) with {len(member_ids)} members")
        return conversation, True

    def _admin_group(self, actor, conversation_id):
        conversation, membership = self.require_member(actor, conversation_id)
        if not conversation.is_group:
            raise ApiError(ErrorCode.INVALID_OPERATION, "Direct conversations have no group settings")
        if not membership.is_admin:
            raise ApiError(ErrorCode.FORBIDDEN, "Only group admins can do that")
        return conversation

    def add_participant(self, actor, conversation_id, username):
        conversation = self._admin_group(actor, conversation_id)
        username = clean_handle(username)
        user = find_by_handle(username)
        if user is None:
            raise ApiError(ErrorCode.USER_NOT_FOUND, f"User @{username} not found")

        _, created = ConversationMember.objects.get_or_create(conversation=conversation, user=user)
        if not created:
            raise ApiError(ErrorCode.INVALID_OPERATION, f"@{user.username} is already in this group")

        logger.info(f"{actor.username} added {user.username} to group {conversation.id}")
        return conversation

    def remove_participant(self, actor, conversation_id, username):
        conversation = self._admin_group(actor, conversation_id)
        user = find_by_handle(username)
        membership = None
        if user is not None:
            membership = conversation.members.filter(user=user).first()
        if membership is None:
            raise ApiError(ErrorCode.USER_NOT_FOUND, f"@{username} is not in this group")

        if conversation.members.count() - 1 < MIN_GROUP_OTHERS + 1:
            raise ApiError(ErrorCode.INVALID_OPERATION, "A group needs at least 3 members")

        if membership.is_admin and not conversation.members.filter(is_admin=True).exclude(pk=membership.pk).exists():
            raise ApiError(ErrorCode.INVALID_OPERATION, "A group needs at least one admin")

        membership.delete()
        logger.info(f"{actor.username} removed {user.username} from group {conversation.id}")
        return conversation

    def update_group(self, actor, conversation_id, name=None, description=None, avatar_url=None):
        conversation = self._admin_group(actor, conversation_id)
        fields = []
        if name is not None:
            conversation.name = clean_group_name(name)
            fields.append('name')
        if description is not None:
            conversation.description = str(description).strip()
            fields.append('description')
        if avatar_url is not None:
            conversation.avatar_url = self.media.validate_image_url(avatar_url)
            fields.append('avatar_url')
        if fields:
            conversation.save(update_fields=fields)
        return conversation

    # ========================================================================
    # MEMBERSHIP & READ MODELS
    # ========================================================================

    def require_member(self, user, conversation_id):
        """
        Return (conversation, membership) or raise CONVERSATION_NOT_FOUND /
        NOT_PARTICIPANT.
        """
        conversation = Conversation.objects.filter(pk=conversation_id).first()
        if conversation is None:
            raise ApiError(ErrorCode.CONVERSATION_NOT_FOUND, "Conversation not found")
        membership = conversation.members.filter(user=user).first()
        if membership is None:
            raise ApiError(ErrorCode.NOT_PARTICIPANT, "You are not a participant of this conversation")
        return conversation, membership

    def get_for(self, user, conversation_id):
        conversation, membership = self.require_member(user, conversation_id)
        self._decorate([conversation], user)
        return conversation

    def list_for(self, user, cursor=None, limit=None):
        qs = (
            Conversation.objects
            .filter(members__user=user)
            .select_related('created_by')
            .prefetch_related('members__user')
        )
        page = self.paginator.paginate(qs, cursor, limit, time_field='updated_at', with_total=True)
        self._decorate(page.items, user)
        return page

    def _decorate(self, conversations, user):
        """Attach last_message and unread_count for `user` to each conversation."""
        for conversation in conversations:
            visible = conversation.messages.filter(is_deleted=False)
            conversation.last_message = visible.select_related('sender').first()

            membership = next((m for m in conversation.members.all() if m.user_id == user.pk), None)
            unread = visible.exclude(sender=user)
            if membership is not None and membership.last_read_at:
                unread = unread.filter(timestamp__gt=membership.last_read_at)
            conversation.unread_count = unread.count()

    def touch(self, conversation, when=None):
        when = when or timezone.now()
        Conversation.objects.filter(pk=conversation.pk).update(updated_at=when)
        conversation.updated_at = when
