"""
Friend requests and friendships.

A request moves PENDING -> ACCEPTED or PENDING -> REJECTED exactly once.
The status change, both Friendship rows and the acceptance notification
are written in one transaction, with the request row locked so two
concurrent answers cannot both succeed.
"""

import logging

from django.db import DatabaseError, transaction
from django.db.models import Q

from ..errors import ApiError, ErrorCode
from ..models import FriendRequest, FriendRequestStatus, Friendship, NotificationType, User
from ..validation import clean_handle
from .users import find_by_handle

logger = logging.getLogger(__name__)

ANSWERS = (FriendRequestStatus.ACCEPTED, FriendRequestStatus.REJECTED)


class FriendService:

    def __init__(self, notifications):
        self.notifications = notifications

    def list_friends(self, user):
        return list(
            User.objects
            .filter(friend_of__user=user)
            .order_by('username')
        )

    def are_friends(self, a, b):
        return Friendship.objects.filter(user=a, friend=b).exists()

    def pending_requests(self, user):
        return list(
            FriendRequest.objects
            .filter(receiver=user, status=FriendRequestStatus.PENDING)
            .select_related('sender')
        )

    def send_request(self, sender, friend_username):
        friend_username = clean_handle(friend_username, field="friend username")
        receiver = find_by_handle(friend_username)
        if receiver is None:
            raise ApiError(ErrorCode.RECEIVER_NOT_FOUND, f"User @{friend_username} not found")

        if receiver.pk == sender.pk:
            raise ApiError(ErrorCode.INVALID_REQUEST, "You cannot send a friend request to yourself")

        if self.are_friends(sender, receiver):
            raise ApiError(ErrorCode.ALREADY_FRIENDS, f"You are already friends with @{receiver.username}")

        pending = FriendRequest.objects.filter(
            Q(sender=sender, receiver=receiver) | Q(sender=receiver, receiver=sender),
            status=FriendRequestStatus.PENDING,
        ).exists()
        if pending:
            raise ApiError(ErrorCode.PENDING_REQUEST, "A friend request is already pending")

        try:
            with transaction.atomic():
                friend_request = FriendRequest.objects.create(sender=sender, receiver=receiver)
                self.notifications.notify(
                    actor=sender,
                    recipient=receiver,
                    type=NotificationType.FRIEND_REQUEST,
                    title="Friend Request",
                    message=f"@{sender.username} sent you a friend request",
                    data={"requestId": friend_request.id, "senderUsername": sender.username},
                )
        except DatabaseError as e:
            logger.error(f"Friend request {sender.username} -> {receiver.username} failed: {e}", exc_info=True)
            raise ApiError(ErrorCode.REQUEST_FAILED, "Failed to send friend request")

        logger.info(f"{sender.username} sent a friend request to {receiver.username}")
        return friend_request

    def respond(self, user, request_id, status):
        """
        Accept or reject a request addressed to `user`.

        Raises:
            ApiError: INVALID_STATUS, NOT_FOUND, FORBIDDEN, ALREADY_HANDLED
        """
        if status not in ANSWERS:
            raise ApiError(ErrorCode.INVALID_STATUS, "Status must be ACCEPTED or REJECTED")

        with transaction.atomic():
            friend_request = (
                FriendRequest.objects
                .select_for_update()
                .select_related('sender', 'receiver')
                .filter(pk=request_id)
                .first()
            )
            if friend_request is None:
                raise ApiError(ErrorCode.NOT_FOUND, "Friend request not found")
            if friend_request.receiver_id != user.pk:
                raise ApiError(ErrorCode.FORBIDDEN, "Only the receiver can answer this request")
            if friend_request.is_terminal:
                raise ApiError(ErrorCode.ALREADY_HANDLED,
                               f"Friend request already {friend_request.status.lower()}")

            friend_request.status = status
            friend_request.save(update_fields=['status', 'updated_at'])

            if status == FriendRequestStatus.ACCEPTED:
                sender = friend_request.sender
                Friendship.objects.get_or_create(user=sender, friend=user)
                Friendship.objects.get_or_create(user=user, friend=sender)
                self.notifications.notify(
                    actor=user,
                    recipient=sender,
                    type=NotificationType.FRIEND_ACCEPTED,
                    title="Friend Request Accepted",
                    message=f"@{user.username} accepted your friend request",
                    data={"requestId": friend_request.id, "friendUsername": user.username},
                )

        logger.info(f"{user.username} {status.lower()} friend request {friend_request.id}")
        return friend_request
