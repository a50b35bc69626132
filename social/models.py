"""
================================================================================
ARENA SOCIAL - DATABASE MODELS
================================================================================

@file        models.py
@description Django ORM models for the athlete social graph and messaging
@version     1.0.0

MODULE PURPOSE
================================================================================
This module defines the database schema behind Arena's social features:
- User model (AbstractUser extension mapped to the identity provider)
- Social graph (Follow, FriendRequest, Friendship)
- Messaging (Conversation, ConversationMember, Message)
- Notifications

DATABASE STRUCTURE
================================================================================
1. User & Identity
   - User (AbstractUser extension, external_id from the identity provider)

2. Social Relationships
   - Follow (directed follower -> followed edge)
   - FriendRequest (PENDING -> ACCEPTED | REJECTED)
   - Friendship (one row per direction once a request is accepted)

3. Messaging System
   - Conversation (direct pair or named group)
   - ConversationMember (membership, admin flag, read tracking)
   - Message (text and/or image, soft delete)

4. Notifications
   - Notification (fan-out rows, one per recipient)

MODEL RELATIONSHIPS
================================================================================
User (N) <─────> (N) User          (Follow, Friendship, FriendRequest)
User (N) <─────> (N) Conversation  (via ConversationMember)
Conversation (1) ──> (N) Message
User (1) ──────> (N) Notification

DIRECT CONVERSATION UNIQUENESS
================================================================================
A two-party conversation stores the sorted pair of its members' ids in
`pair_key` ("<low>:<high>"). The column is UNIQUE, so the database itself
rejects a second conversation for the same unordered pair. Group
conversations leave `pair_key` NULL.

================================================================================
"""

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone as dj_timezone
import pytz

# ============================================================================
# CONSTANTS & CHOICES
# ============================================================================

"""
Timezone choices for user preference selection.
Uses all available timezones from pytz library.
"""
TIMEZONE_CHOICES = [(tz, tz) for tz in pytz.all_timezones]


class FriendRequestStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    ACCEPTED = 'ACCEPTED', 'Accepted'
    REJECTED = 'REJECTED', 'Rejected'


class NotificationType(models.TextChoices):
    NEW_MESSAGE = 'NEW_MESSAGE', 'New message'
    NEW_FOLLOWER = 'NEW_FOLLOWER', 'New follower'
    FRIEND_REQUEST = 'FRIEND_REQUEST', 'Friend request'
    FRIEND_ACCEPTED = 'FRIEND_ACCEPTED', 'Friend request accepted'


def make_pair_key(first_id, second_id):
    """Normalized key for an unordered pair of user ids."""
    low, high = sorted((int(first_id), int(second_id)))
    return f"{low}:{high}"


# ============================================================================
# SECTION 1: USER & IDENTITY MODELS
# ============================================================================

class User(AbstractUser):
    """
    Athlete profile.

    Extends Django's AbstractUser with the fields the social features
    display. Authentication itself happens at the identity provider; the
    provider's opaque user id is stored in `external_id`.

    Attributes:
        external_id (CharField): Identity provider user id
        profile_image (URLField): Avatar URL on the media host
        bio (TextField): Profile biography (max 500 chars)
        timezone (CharField): User's preferred timezone

    Properties:
        full_name: "First Last", falling back to the username

    Related Names:
        following: Follow rows where this user is the follower
        followers: Follow rows where this user is followed
        friendships: Friendship rows owned by this user
        sent_friend_requests / received_friend_requests: FriendRequest rows
        conversation_memberships: ConversationMember rows
        sent_messages: Message rows authored by this user
        notifications: Notification rows addressed to this user

    Example:
        user = User.objects.get(external_id='user_2abc')
        print(user.full_name)
    """

    external_id = models.CharField(
        max_length=64,
        unique=True,
        null=True,
        blank=True,
        help_text="Opaque user id issued by the identity provider"
    )
    profile_image = models.URLField(
        max_length=500,
        blank=True,
        help_text="Avatar image URL"
    )
    bio = models.TextField(
        max_length=500,
        blank=True,
        help_text="Profile biography or description"
    )
    timezone = models.CharField(
        max_length=100,
        choices=TIMEZONE_CHOICES,
        default='UTC',
        help_text="User's preferred timezone for display"
    )

    @property
    def full_name(self):
        name = f"{self.first_name} {self.last_name}".strip()
        return name or self.username

    def __str__(self):
        return self.username


# ============================================================================
# SECTION 2: SOCIAL RELATIONSHIP MODELS
# ============================================================================

class Follow(models.Model):
    """
    Follower-following relationship between users.

    Represents a one-way follow connection. Two users are "mutual" when a
    row exists in both directions.

    Attributes:
        follower (ForeignKey): User who is following
        followed (ForeignKey): User being followed
        created_at (DateTimeField): When the follow happened

    Meta:
        unique_together: Prevents duplicate follow relationships

    Example:
        Follow.objects.create(follower=user_a, followed=user_b)

        is_following = Follow.objects.filter(
            follower=request.user,
            followed=profile_user
        ).exists()
    """

    follower = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='following',
        help_text="User who is following"
    )
    followed = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='followers',
        help_text="User being followed"
    )
    created_at = models.DateTimeField(
        default=dj_timezone.now,
        help_text="Follow creation timestamp"
    )

    class Meta:
        unique_together = ('follower', 'followed')

    def __str__(self):
        return f"{self.follower} -> {self.followed}"


class FriendRequest(models.Model):
    """
    Pending or answered friend request.

    A request starts PENDING. ACCEPTED and REJECTED are terminal and can
    never be changed again.

    Attributes:
        sender (ForeignKey): User who asked
        receiver (ForeignKey): User who must answer
        status (CharField): PENDING, ACCEPTED or REJECTED
        created_at (DateTimeField): Creation timestamp
        updated_at (DateTimeField): Last status change
    """

    sender = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='sent_friend_requests',
        help_text="User who sent the request"
    )
    receiver = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='received_friend_requests',
        help_text="User who received the request"
    )
    status = models.CharField(
        max_length=10,
        choices=FriendRequestStatus.choices,
        default=FriendRequestStatus.PENDING,
        help_text="Request state (ACCEPTED and REJECTED are final)"
    )
    created_at = models.DateTimeField(
        default=dj_timezone.now,
        help_text="Request creation timestamp"
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="Last status change"
    )

    class Meta:
        ordering = ['-created_at']

    @property
    def is_terminal(self):
        return self.status != FriendRequestStatus.PENDING

    def __str__(self):
        return f"{self.sender} -> {self.receiver} ({self.status})"


class Friendship(models.Model):
    """
    One direction of an accepted friendship.

    Accepting a request writes two rows (user -> friend, friend -> user) so
    either side can list friends with a single filter.
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='friendships',
        help_text="Owner of this friendship row"
    )
    friend = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='friend_of',
        help_text="The friend"
    )
    created_at = models.DateTimeField(
        default=dj_timezone.now,
        help_text="When the friendship started"
    )

    class Meta:
        unique_together = ('user', 'friend')

    def __str__(self):
        return f"{self.user} <-> {self.friend}"


# ============================================================================
# SECTION 3: MESSAGING SYSTEM MODELS
# ============================================================================

class Conversation(models.Model):
    """
    Chat conversation (direct or group).

    A direct conversation has exactly two members and a non-null
    `pair_key`; a group has a name, three or more members and at least one
    admin member.

    Attributes:
        name (CharField): Group name (blank for direct conversations)
        description (TextField): Group description
        avatar_url (URLField): Group avatar on the media host
        is_group (BooleanField): True for group chats
        created_by (ForeignKey): User who created the conversation
        pair_key (CharField): Sorted member-id pair for direct conversations
        created_at (DateTimeField): Creation timestamp
        updated_at (DateTimeField): Last activity (latest message time)

    Related Names:
        members: QuerySet of ConversationMember objects
        messages: QuerySet of Message objects

    Example:
        dm = Conversation.objects.create(pair_key=make_pair_key(a.id, b.id))

        group = Conversation.objects.create(
            name="Saturday Squad",
            is_group=True,
            created_by=request.user
        )
    """

    name = models.CharField(
        max_length=100,
        blank=True,
        help_text="Conversation name (required for groups)"
    )
    description = models.TextField(
        max_length=500,
        blank=True,
        help_text="Group description"
    )
    avatar_url = models.URLField(
        max_length=500,
        blank=True,
        help_text="Group avatar image URL"
    )
    is_group = models.BooleanField(
        default=False,
        help_text="True for group chats, False for direct conversations"
    )
    created_by = models.ForeignKey(
        User,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='created_conversations',
        help_text="User who created this conversation"
    )
    pair_key = models.CharField(
        max_length=64,
        unique=True,
        null=True,
        blank=True,
        help_text="Sorted member ids '<low>:<high>' (direct conversations only)"
    )
    created_at = models.DateTimeField(
        default=dj_timezone.now,
        help_text="Creation timestamp"
    )
    updated_at = models.DateTimeField(
        default=dj_timezone.now,
        db_index=True,
        help_text="Last activity timestamp, bumped with every message"
    )

    def __str__(self):
        if self.is_group:
            return self.name or f"Group #{self.id}"
        return f"DM #{self.id}"


class ConversationMember(models.Model):
    """
    Membership in a conversation.

    Attributes:
        conversation (ForeignKey): Conversation this membership belongs to
        user (ForeignKey): User who is a member
        joined_at (DateTimeField): When user joined
        last_read_at (DateTimeField): Last time user read messages
        is_admin (BooleanField): Admin privileges in group

    Meta:
        unique_together: One membership per user per conversation
    """

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name='members',
        help_text="Conversation this membership belongs to"
    )
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='conversation_memberships',
        help_text="User who is a member"
    )
    joined_at = models.DateTimeField(
        default=dj_timezone.now,
        help_text="When user joined this conversation"
    )
    last_read_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Last time user read messages (for unread count)"
    )
    is_admin = models.BooleanField(
        default=False,
        help_text="Admin privileges in group conversation"
    )

    class Meta:
        unique_together = ('conversation', 'user')

    def __str__(self):
        return f"{self.user} in {self.conversation}"


class Message(models.Model):
    """
    Chat message in a conversation.

    Content is required unless an image is attached. Messages are never
    edited; deleting one only flags it.

    Attributes:
        conversation (ForeignKey): Conversation this message belongs to
        sender (ForeignKey): User who sent the message
        content (TextField): Message text ("[Image]" for image-only sends)
        image_url (URLField): Attached image on the media host
        timestamp (DateTimeField): Creation timestamp
        is_deleted (BooleanField): Soft-delete flag
        deleted_at (DateTimeField): When the sender deleted it

    Meta:
        ordering: Newest first (descending timestamp, then id)
    """

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name='messages',
        help_text="Conversation this message belongs to"
    )
    sender = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='sent_messages',
        help_text="User who sent this message"
    )
    content = models.TextField(
        blank=True,
        help_text="Message text content"
    )
    image_url = models.URLField(
        max_length=500,
        blank=True,
        help_text="Attached image URL"
    )
    timestamp = models.DateTimeField(
        default=dj_timezone.now,
        db_index=True,
        help_text="Message creation timestamp"
    )
    is_deleted = models.BooleanField(
        default=False,
        help_text="Soft-deleted by its sender"
    )
    deleted_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Soft-delete timestamp"
    )

    class Meta:
        ordering = ['-timestamp', '-id']

    def __str__(self):
        return f"[Room {self.conversation_id}] {self.sender}: {self.content[:30]}"


# ============================================================================
# SECTION 4: NOTIFICATION MODELS
# ============================================================================

class NotificationQuerySet(models.QuerySet):

    def unread(self):
        return self.filter(is_read=False)

    def mark_all_as_read(self):
        return self.filter(is_read=False).update(is_read=True)


class Notification(models.Model):
    """
    User activity notification.

    One row per recipient. Rows for a single action (a message in a group,
    an accepted friend request) are written in the same transaction as the
    action itself.

    Attributes:
        user (ForeignKey): User receiving the notification
        actor (ForeignKey): User who performed the action
        type (CharField): NotificationType value
        title (CharField): Short heading
        message (CharField): Human readable text
        data (JSONField): Ids the client needs to deep-link
        conversation (ForeignKey): Associated conversation (if applicable)
        is_read (BooleanField): Read status
        created_at (DateTimeField): Creation timestamp

    Example:
        request.user.notifications.unread().count()
        request.user.notifications.mark_all_as_read()
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='notifications',
        help_text="User receiving this notification"
    )
    actor = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        help_text="User who performed the action"
    )
    type = models.CharField(
        max_length=20,
        choices=NotificationType.choices,
        help_text="Notification kind"
    )
    title = models.CharField(
        max_length=100,
        help_text="Short heading"
    )
    message = models.CharField(
        max_length=255,
        help_text="Notification text"
    )
    data = models.JSONField(
        default=dict,
        blank=True,
        help_text="Deep-link payload (ids, usernames)"
    )
    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='notifications',
        help_text="Associated conversation (if applicable)"
    )
    is_read = models.BooleanField(
        default=False,
        help_text="Whether notification has been read"
    )
    created_at = models.DateTimeField(
        default=dj_timezone.now,
        help_text="Notification creation timestamp"
    )

    objects = NotificationQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.type} for {self.user}"
