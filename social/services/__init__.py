"""
Service handles for the social app.

`build_services` wires every service from Django settings. It is called
once by SocialConfig.ready(); ServiceMiddleware then hands the same
container to each request as `request.services`.
"""

from dataclasses import dataclass

from .conversations import ConversationService
from .friends import FriendService
from .media import MediaService
from .messaging import MessageService
from .notifications import NotificationService
from .pagination import CursorPaginator
from .relationships import RelationshipService


@dataclass
class ServiceContainer:
    paginator: CursorPaginator
    notifications: NotificationService
    media: MediaService
    relationships: RelationshipService
    conversations: ConversationService
    messages: MessageService
    friends: FriendService


def build_services(settings, uploader):
    """
    Args:
        settings: django.conf.settings (or any object with the same names)
        uploader: Media host uploader (cloudinary.uploader in production)
    """
    paginator = CursorPaginator(
        default_limit=settings.MESSAGING_PAGE_SIZE,
        max_limit=settings.MESSAGING_MAX_PAGE_SIZE,
    )
    notifications = NotificationService()
    media = MediaService(
        uploader=uploader,
        allowed_hosts=settings.MESSAGING_ALLOWED_MEDIA_HOSTS,
        folder=settings.CLOUDINARY_UPLOAD_FOLDER,
        max_bytes=settings.MEDIA_UPLOAD_MAX_BYTES,
    )
    relationships = RelationshipService(
        notifications=notifications,
        paginator=paginator,
        allow_existing_threads=settings.MESSAGING_ALLOW_EXISTING_THREADS,
    )
    conversations = ConversationService(paginator=paginator, media=media)
    messages = MessageService(
        conversations=conversations,
        relationships=relationships,
        notifications=notifications,
        media=media,
        paginator=paginator,
    )
    friends = FriendService(notifications=notifications)

    return ServiceContainer(
        paginator=paginator,
        notifications=notifications,
        media=media,
        relationships=relationships,
        conversations=conversations,
        messages=messages,
        friends=friends,
    )
