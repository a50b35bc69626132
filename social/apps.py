import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class SocialConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'social'
    verbose_name = 'Arena Social'

    services = None

    def ready(self):
        from django.conf import settings
        import cloudinary
        import cloudinary.uploader

        from .services import build_services

        if settings.CLOUDINARY.get('CLOUD_NAME'):
            cloudinary.config(
                cloud_name=settings.CLOUDINARY['CLOUD_NAME'],
                api_key=settings.CLOUDINARY['API_KEY'],
                api_secret=settings.CLOUDINARY['API_SECRET'],
                secure=True,
            )
        else:
            logger.info("CLOUDINARY_CLOUD_NAME not set, media uploads are disabled")

        self.services = build_services(settings, uploader=cloudinary.uploader)
