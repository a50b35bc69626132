"""
================================================================================
ARENA SOCIAL - RELATIONSHIP GATE & FOLLOW GRAPH
================================================================================

Decides whether two athletes may talk directly and maintains the follow
edges that decision reads.

MESSAGING RULE
================================================================================
A may open a direct conversation with B when:
    1. A follows B AND B follows A (mutual), or
    2. a direct conversation between A and B already exists
       (existing threads stay usable after an unfollow; switchable with
       MESSAGING_ALLOW_EXISTING_THREADS)

A may never message themselves.

The gate is a pure read. It never creates conversations or edges.
================================================================================
"""

import logging
from dataclasses import dataclass

from django.db import IntegrityError, transaction

from ..errors import ApiError, ErrorCode
from ..models import Conversation, Follow, NotificationType, User, make_pair_key
from .users import find_by_handle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GateDecision:
    """Outcome of a successful gate check; `reason` is 'mutual' or 'existing_conversation'."""
    sender: User
    receiver: User
    reason: str


class RelationshipService:
    """
    Args:
        notifications: NotificationService used for NEW_FOLLOWER rows
        paginator: CursorPaginator for follower/following lists
        allow_existing_threads: Let an existing direct conversation bypass
            the mutual-follow requirement
    """

    def __init__(self, notifications, paginator, allow_existing_threads=True):
        self.notifications = notifications
        self.paginator = paginator
        self.allow_existing_threads = allow_existing_threads

    # ========================================================================
    # GATE
    # ========================================================================

    def is_following(self, follower, followed):
        return Follow.objects.filter(follower=follower, followed=followed).exists()

    def is_mutual(self, a, b):
        return self.is_following(a, b) and self.is_following(b, a)

    def has_direct_conversation(self, a, b):
        return Conversation.objects.filter(pair_key=make_pair_key(a.pk, b.pk)).exists()

    def evaluate(self, sender, receiver):
        """
        Apply the messaging rule to two resolved users.

        Raises:
            ApiError(INVALID_OPERATION): sender and receiver are the same user
            ApiError(FORBIDDEN): not mutual and no existing conversation
        """
        if sender.pk == receiver.pk:
            raise ApiError(ErrorCode.INVALID_OPERATION, "Cannot send message to yourself")

        if self.is_mutual(sender, receiver):
            return GateDecision(sender, receiver, 'mutual')

        if self.allow_existing_threads and self.has_direct_conversation(sender, receiver):
            return GateDecision(sender, receiver, 'existing_conversation')

        logger.warning(f"Messaging blocked: {sender.username} -> {receiver.username} (not mutual)")
        raise ApiError(ErrorCode.FORBIDDEN, "You can only message athletes who follow you back")

    def check_can_message(self, sender, receiver_handle):
        receiver = find_by_handle(receiver_handle)
        if receiver is None:
            raise ApiError(ErrorCode.NOT_FOUND, f"User @{receiver_handle} not found")
        return self.evaluate(sender, receiver)

    # ========================================================================
    # FOLLOW / UNFOLLOW
    # ========================================================================

    def _target(self, actor, username):
        target = find_by_handle(username)
        if target is None:
            raise ApiError(ErrorCode.USER_NOT_FOUND, f"User @{username} not found")
        if target.pk == actor.pk:
            raise ApiError(ErrorCode.INVALID_OPERATION, "You cannot follow yourself")
        return target

    def follow(self, actor, username):
        target = self._target(actor, username)

        if self.is_following(actor, target):
            raise ApiError(ErrorCode.ALREADY_FOLLOWING, f"You are already following @{target.username}")

        try:
            with transaction.atomic():
                Follow.objects.create(follower=actor, followed=target)
                self.notifications.notify(
                    actor=actor,
                    recipient=target,
                    type=NotificationType.NEW_FOLLOWER,
                    title="New Follower",
                    message=f"@{actor.username} started following you",
                    data={"followerUsername": actor.username, "followerId": actor.pk},
                )
        except IntegrityError:
            # concurrent duplicate follow hit the unique_together constraint
            raise ApiError(ErrorCode.ALREADY_FOLLOWING, f"You are already following @{target.username}")

        logger.info(f"{actor.username} followed {target.username}")
        return self._follow_state(actor, target, True)

    def unfollow(self, actor, username):
        target = self._target(actor, username)

        deleted, _ = Follow.objects.filter(follower=actor, followed=target).delete()
        if not deleted:
            raise ApiError(ErrorCode.NOT_FOLLOWING, f"You are not following @{target.username}")

        logger.info(f"{actor.username} unfollowed {target.username}")
        return self._follow_state(actor, target, False)

    def _follow_state(self, actor, target, is_following):
        return {
            "isFollowing": is_following,
            "followerCount": target.followers.count(),
            "followingCount": actor.following.count(),
        }

    # ========================================================================
    # LISTS & COUNTERS
    # ========================================================================

    def _profile(self, username):
        user = find_by_handle(username)
        if user is None:
            raise ApiError(ErrorCode.USER_NOT_FOUND, f"User @{username} not found")
        return user

    def followers(self, username, cursor=None, limit=None):
        user = self._profile(username)
        qs = Follow.objects.filter(followed=user).select_related('follower')
        return self.paginator.paginate(qs, cursor, limit, time_field='created_at', with_total=True)

    def following(self, username, cursor=None, limit=None):
        user = self._profile(username)
        qs = Follow.objects.filter(follower=user).select_related('followed')
        return self.paginator.paginate(qs, cursor, limit, time_field='created_at', with_total=True)

    def counters(self, username):
        user = self._profile(username)
        return {
            "followersCount": user.followers.count(),
            "followingCount": user.following.count(),
        }
