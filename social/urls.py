"""
================================================================================
ARENA SOCIAL - URL CONFIGURATION
================================================================================

@file        urls.py
@description JSON API routes for messaging, friends, follows and notifications

URL STRUCTURE OVERVIEW
================================================================================
1. Messaging (send, conversations, history, read markers, delete, upload)
2. Group Management (create, rename, members)
3. Friends (list, requests, accept / reject)
4. Follow Graph (follow, unfollow, lists, counters)
5. Notifications (list, mark read)

NAMING CONVENTIONS
================================================================================
- Resource actions: <resource>_<action> (e.g. 'delete_message')
- Toggles: 'toggle_' prefix (POST follows, DELETE unfollows)

URL PARAMETER TYPES
================================================================================
- <str:username>: Athlete handle
- <int:conversation_id>: Conversation primary key
- <int:message_id>: Message primary key
- <int:request_id>: FriendRequest primary key
- <int:notification_id>: Notification primary key

RESPONSES
================================================================================
Every route answers JSON. Failures use the shared error shape:
    {"success": false, "error": "...", "code": "RECEIVER_NOT_FOUND"}

================================================================================
"""

from django.urls import path
from . import views


urlpatterns = [

    # ========================================================================
    # SECTION 1: MESSAGING
    # ========================================================================

    path(
        "messages/send",
        views.send_message,
        name="send_message"
    ),  # Append a message (direct by username, or into a conversation)

    path(
        "messages/conversations",
        views.conversations,
        name="conversations"
    ),  # Caller's conversations, most recent first

    path(
        "messages/conversations/<int:conversation_id>",
        views.conversation_detail,
        name="conversation_detail"
    ),  # One conversation with participants

    path(
        "messages/conversations/<int:conversation_id>/messages",
        views.conversation_messages,
        name="conversation_messages"
    ),  # Message history (?cursor=&limit=)

    path(
        "messages/conversations/<int:conversation_id>/read",
        views.mark_conversation_read,
        name="mark_conversation_read"
    ),  # Move the caller's read marker

    path(
        "messages/conversations/<int:conversation_id>/latest",
        views.latest_message,
        name="latest_message"
    ),  # Newest visible message

    path(
        "messages/<int:message_id>",
        views.delete_message,
        name="delete_message"
    ),  # Soft delete (sender only)

    path(
        "messages/can-message/<str:username>",
        views.can_message,
        name="can_message"
    ),  # Relationship gate check

    path(
        "messages/upload",
        views.upload_media,
        name="upload_media"
    ),  # Image/video upload to the media host


    # ========================================================================
    # SECTION 2: GROUP MANAGEMENT
    # ========================================================================

    path(
        "messages/groups",
        views.create_group,
        name="create_group"
    ),  # Create (or return existing) group

    path(
        "messages/groups/<int:conversation_id>",
        views.update_group,
        name="update_group"
    ),  # Rename / describe / avatar (admins)

    path(
        "messages/groups/<int:conversation_id>/participants",
        views.add_group_participant,
        name="add_group_participant"
    ),  # Add member (admins)

    path(
        "messages/groups/<int:conversation_id>/participants/<str:username>",
        views.remove_group_participant,
        name="remove_group_participant"
    ),  # Remove member (admins)


    # ========================================================================
    # SECTION 3: FRIENDS
    # ========================================================================

    path(
        "friends",
        views.friends,
        name="friends"
    ),  # Caller's friends

    path(
        "friends/request",
        views.friend_requests,
        name="friend_requests"
    ),  # GET pending received, POST send

    path(
        "friends/request/<int:request_id>",
        views.respond_friend_request,
        name="respond_friend_request"
    ),  # PATCH {status: ACCEPTED | REJECTED}


    # ========================================================================
    # SECTION 4: FOLLOW GRAPH
    # ========================================================================

    path(
        "follow/<str:username>",
        views.toggle_follow,
        name="toggle_follow"
    ),  # POST follow, DELETE unfollow

    path(
        "follow/<str:username>/followers",
        views.followers_list,
        name="followers_list"
    ),  # Paginated followers

    path(
        "follow/<str:username>/following",
        views.following_list,
        name="following_list"
    ),  # Paginated following

    path(
        "follow/<str:username>/counters",
        views.follow_counters,
        name="follow_counters"
    ),  # Follower / following counts


    # ========================================================================
    # SECTION 5: NOTIFICATIONS
    # ========================================================================

    path(
        "notifications",
        views.notifications,
        name="notifications"
    ),  # GET list + unread count, POST mark read ({ids} or {all})

    path(
        "notifications/<int:notification_id>/read",
        views.mark_notification_read,
        name="mark_notification_read"
    ),  # Mark one read
]
