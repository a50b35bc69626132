"""
Media host integration (Cloudinary).

The Cloudinary SDK is configured once at startup (SocialConfig.ready) and
its uploader is handed to MediaService, so tests can pass a stand-in
uploader object with the same `upload(file, **options)` signature.
"""

import logging

from PIL import Image, UnidentifiedImageError

from ..errors import ApiError, ErrorCode
from ..validation import clean_image_url

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    'image/jpeg',
    'image/png',
    'image/webp',
    'video/mp4',
    'video/quicktime',
}


class MediaService:
    """
    Args:
        uploader: Object exposing `upload(file, **options)` (cloudinary.uploader)
        allowed_hosts: Hostnames image URLs may point to
        folder: Destination folder on the media host
        max_bytes: Upload size limit
    """

    def __init__(self, uploader, allowed_hosts, folder='sports-chat', max_bytes=10 * 1024 * 1024):
        self.uploader = uploader
        self.allowed_hosts = tuple(h.lower() for h in allowed_hosts)
        self.folder = folder
        self.max_bytes = max_bytes

    def validate_image_url(self, url):
        return clean_image_url(url, self.allowed_hosts)

    def _verify_image(self, upload):
        try:
            with Image.open(upload) as img:
                img.verify()
        except (UnidentifiedImageError, OSError):
            raise ApiError(ErrorCode.INVALID_FILE_TYPE, "File is not a valid image")
        finally:
            upload.seek(0)

    def upload(self, upload, user=None):
        """
        Validate and push an uploaded file to the media host.

        Args:
            upload: Django UploadedFile
            user: Uploader, used for logging only

        Returns:
            str: Public HTTPS URL of the stored asset
        """
        if upload is None:
            raise ApiError(ErrorCode.NO_FILE, "No file uploaded")

        if upload.content_type not in ALLOWED_CONTENT_TYPES:
            raise ApiError(ErrorCode.INVALID_FILE_TYPE, f"Unsupported file type: {upload.content_type}")

        if upload.size > self.max_bytes:
            raise ApiError(ErrorCode.FILE_TOO_LARGE, f"File too large (max {self.max_bytes // (1024 * 1024)}MB)")

        is_video = upload.content_type.startswith('video/')
        if not is_video:
            self._verify_image(upload)

        try:
            result = self.uploader.upload(
                upload,
                folder=self.folder,
                resource_type='video' if is_video else 'image',
                transformation=[{'quality': 'auto:good'}, {'fetch_format': 'auto'}],
            )
        except Exception as e:
            logger.error(f"Media upload failed for {user}: {e}", exc_info=True)
            raise ApiError(ErrorCode.UPLOAD_FAILED, "Upload failed, please try again")

        url = result.get('secure_url')
        if not url:
            logger.error(f"Media host returned no secure_url for {user}: {result}")
            raise ApiError(ErrorCode.UPLOAD_FAILED, "Upload failed, please try again")

        logger.info(f"Uploaded {upload.name} ({upload.size} bytes) for {user}: {url}")
        return url
