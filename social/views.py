
from django.http import JsonResponse

from .decorators import api_view, read_json
from .errors import ApiError, ErrorCode
from .serializers import (
    conversation_to_dict, follow_to_dict, friend_request_to_dict, message_to_dict,
    notification_to_dict, page_to_dict, user_summary,
)
from .validation import clean_id


# ==================== MESSAGES ====================

@api_view(['POST'], failure=ErrorCode.SEND_FAILED, profile_missing=ErrorCode.SENDER_NOT_FOUND)
def send_message(request):
    data = read_json(request)
    message, conversation = request.services.messages.send(
        request.user,
        content=data.get("content"),
        receiver_username=data.get("receiverUsername"),
        conversation_id=data.get("conversationId"),
        image_url=data.get("imageUrl"),
    )
    return JsonResponse({
        "success": True,
        "message": message_to_dict(message),
        "conversation": conversation_to_dict(conversation),
    })


@api_view(['GET'], failure=ErrorCode.FETCH_FAILED)
def conversations(request):
    page = request.services.conversations.list_for(
        request.user,
        cursor=request.GET.get("cursor"),
        limit=request.GET.get("limit"),
    )
    return JsonResponse(page_to_dict(page, "conversations", conversation_to_dict))


@api_view(['GET'], failure=ErrorCode.FETCH_FAILED)
def conversation_detail(request, conversation_id):
    conversation = request.services.conversations.get_for(request.user, conversation_id)
    return JsonResponse({"success": True, "conversation": conversation_to_dict(conversation)})


@api_view(['GET'], failure=ErrorCode.FETCH_FAILED)
def conversation_messages(request, conversation_id):
    page = request.services.messages.list_messages(
        request.user,
        conversation_id,
        cursor=request.GET.get("cursor"),
        limit=request.GET.get("limit"),
    )
    return JsonResponse(page_to_dict(page, "messages", message_to_dict))


@api_view(['POST'])
def mark_conversation_read(request, conversation_id):
    count = request.services.messages.mark_read(request.user, conversation_id)
    return JsonResponse({"success": True, "markedRead": count})


@api_view(['GET'], failure=ErrorCode.FETCH_FAILED)
def latest_message(request, conversation_id):
    message = request.services.messages.latest_message(request.user, conversation_id)
    return JsonResponse({"success": True, "message": message_to_dict(message) if message else None})


@api_view(['DELETE', 'POST'])
def delete_message(request, message_id):
    message = request.services.messages.delete_message(request.user, message_id)
    return JsonResponse({"success": True, "messageId": message.id})


@api_view(['GET'])
def can_message(request, username):
    # Relationship check behind the "Message" button on profiles
    decision = request.services.relationships.check_can_message(request.user, username)
    return JsonResponse({
        "success": True,
        "canMessage": True,
        "reason": decision.reason,
        "user": user_summary(decision.receiver),
    })


@api_view(['POST'], failure=ErrorCode.UPLOAD_FAILED)
def upload_media(request):
    url = request.services.media.upload(request.FILES.get("file"), user=request.user)
    return JsonResponse({"success": True, "url": url})


# ==================== GROUPS ====================

@api_view(['POST'])
def create_group(request):
    data = read_json(request)
    conversation, created = request.services.conversations.create_group(
        request.user,
        name=data.get("name"),
        usernames=data.get("participantUsernames"),
        description=data.get("description"),
        avatar_url=data.get("avatarUrl"),
    )
    return JsonResponse({
        "success": True,
        "created": created,
        "message": f'Created group "{conversation.name}"' if created else "Group already exists",
        "conversation": conversation_to_dict(conversation),
    }, status=201 if created else 200)


@api_view(['PATCH'])
def update_group(request, conversation_id):
    data = read_json(request)
    conversation = request.services.conversations.update_group(
        request.user,
        conversation_id,
        name=data.get("name"),
        description=data.get("description"),
        avatar_url=data.get("avatarUrl"),
    )
    return JsonResponse({"success": True, "conversation": conversation_to_dict(conversation)})


@api_view(['POST'])
def add_group_participant(request, conversation_id):
    data = read_json(request)
    conversation = request.services.conversations.add_participant(
        request.user, conversation_id, data.get("username")
    )
    return JsonResponse({"success": True, "conversation": conversation_to_dict(conversation)})


@api_view(['DELETE'])
def remove_group_participant(request, conversation_id, username):
    conversation = request.services.conversations.remove_participant(request.user, conversation_id, username)
    return JsonResponse({"success": True, "conversation": conversation_to_dict(conversation)})


# ==================== FRIENDS ====================

@api_view(['GET'], failure=ErrorCode.FETCH_FAILED)
def friends(request):
    friend_list = request.services.friends.list_friends(request.user)
    return JsonResponse({
        "success": True,
        "friends": [user_summary(f) for f in friend_list],
        "count": len(friend_list),
    })


@api_view(['GET', 'POST'], failure=ErrorCode.REQUEST_FAILED, profile_missing=ErrorCode.SENDER_NOT_FOUND)
def friend_requests(request):
    if request.method == "POST":
        data = read_json(request)
        friend_request = request.services.friends.send_request(request.user, data.get("friendId"))
        return JsonResponse({
            "success": True,
            "message": "Friend request sent",
            "request": friend_request_to_dict(friend_request),
        }, status=201)

    pending = request.services.friends.pending_requests(request.user)
    return JsonResponse({
        "success": True,
        "requests": [friend_request_to_dict(r) for r in pending],
    })


@api_view(['PATCH'], failure=ErrorCode.REQUEST_FAILED)
def respond_friend_request(request, request_id):
    data = read_json(request)
    friend_request = request.services.friends.respond(request.user, request_id, data.get("status"))
    return JsonResponse({
        "success": True,
        "message": f"Friend request {friend_request.status.lower()}",
        "request": friend_request_to_dict(friend_request),
    })


# ==================== FOLLOW ====================

@api_view(['POST', 'DELETE'])
def toggle_follow(request, username):
    relationships = request.services.relationships
    if request.method == "DELETE":
        state = relationships.unfollow(request.user, username)
    else:
        state = relationships.follow(request.user, username)
    return JsonResponse({"success": True, **state})


@api_view(['GET'], failure=ErrorCode.FETCH_FAILED)
def followers_list(request, username):
    page = request.services.relationships.followers(
        username, cursor=request.GET.get("cursor"), limit=request.GET.get("limit")
    )
    return JsonResponse(page_to_dict(page, "followers", lambda f: follow_to_dict(f, "follower")))


@api_view(['GET'], failure=ErrorCode.FETCH_FAILED)
def following_list(request, username):
    page = request.services.relationships.following(
        username, cursor=request.GET.get("cursor"), limit=request.GET.get("limit")
    )
    return JsonResponse(page_to_dict(page, "following", lambda f: follow_to_dict(f, "followed")))


@api_view(['GET'], failure=ErrorCode.FETCH_FAILED, login=False)
def follow_counters(request, username):
    return JsonResponse({"success": True, **request.services.relationships.counters(username)})


# ==================== NOTIFICATIONS ====================

@api_view(['GET', 'POST'])
def notifications(request):
    service = request.services.notifications
    if request.method == "POST":
        data = read_json(request)
        ids = data.get("ids")
        if ids is not None:
            if not isinstance(ids, list):
                raise ApiError(ErrorCode.VALIDATION_ERROR, "ids must be a list of notification ids",
                               details={"ids": "must be a list"})
            ids = [clean_id(i, "ids") for i in ids]
        updated = service.mark_read(request.user, ids=ids, mark_all=bool(data.get("all")))
        return JsonResponse({"success": True, "updated": updated})

    limit = request.services.paginator.parse_limit(request.GET.get("limit") or 10)
    include_read = request.GET.get("includeRead") == "true"
    items = service.list_for(request.user, include_read=include_read, limit=limit)
    return JsonResponse({
        "success": True,
        "notifications": [notification_to_dict(n) for n in items],
        "unreadCount": service.unread_count(request.user),
    })


@api_view(['POST'])
def mark_notification_read(request, notification_id):
    notification = request.services.notifications.mark_one(request.user, notification_id)
    return JsonResponse({"success": True, "notification": notification_to_dict(notification)})
