"""JSON shapes returned by the API (camelCase keys, local-time ISO timestamps)."""

from django.utils import timezone


def iso(value):
    if value is None:
        return None
    return timezone.localtime(value).isoformat()


def user_summary(user):
    return {
        "id": user.id,
        "username": user.username,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "fullName": user.full_name,
        "profileImage": user.profile_image or None,
    }


def message_to_dict(message):
    return {
        "id": message.id,
        "conversationId": message.conversation_id,
        "content": message.content,
        "imageUrl": message.image_url or None,
        "createdAt": iso(message.timestamp),
        "sender": user_summary(message.sender),
    }


def conversation_to_dict(conversation):
    members = list(conversation.members.all())
    data = {
        "id": conversation.id,
        "name": conversation.name or None,
        "description": conversation.description or None,
        "avatarUrl": conversation.avatar_url or None,
        "isGroup": conversation.is_group,
        "adminIds": [m.user_id for m in members if m.is_admin],
        "participants": [user_summary(m.user) for m in members],
        "createdAt": iso(conversation.created_at),
        "updatedAt": iso(conversation.updated_at),
    }
    if hasattr(conversation, 'last_message'):
        last = conversation.last_message
        data["lastMessage"] = message_to_dict(last) if last else None
    if hasattr(conversation, 'unread_count'):
        data["unreadCount"] = conversation.unread_count
    return data


def friend_request_to_dict(friend_request):
    return {
        "id": friend_request.id,
        "status": friend_request.status,
        "sender": user_summary(friend_request.sender),
        "receiver": user_summary(friend_request.receiver),
        "createdAt": iso(friend_request.created_at),
        "updatedAt": iso(friend_request.updated_at),
    }


def follow_to_dict(follow, side):
    """`side` is 'follower' or 'followed', the user shown in the list."""
    return {
        "id": follow.id,
        "createdAt": iso(follow.created_at),
        "user": user_summary(getattr(follow, side)),
    }


def notification_to_dict(notification):
    return {
        "id": notification.id,
        "type": notification.type,
        "title": notification.title,
        "message": notification.message,
        "data": notification.data,
        "isRead": notification.is_read,
        "createdAt": iso(notification.created_at),
        "actor": user_summary(notification.actor) if notification.actor else None,
    }


def page_to_dict(page, key, serialize):
    data = {
        "success": True,
        key: [serialize(item) for item in page.items],
        "hasMore": page.has_more,
        "nextCursor": page.next_cursor,
    }
    if page.total is not None:
        data["total"] = page.total
    return data
