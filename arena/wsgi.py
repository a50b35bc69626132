"""
WSGI config for the arena project.

Entry point for gunicorn (see gunicorn.conf.py). Loading the application
runs SocialConfig.ready(), which configures Cloudinary and builds the
service handles shared by every request.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'arena.settings')

application = get_wsgi_application()
