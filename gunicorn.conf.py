# gunicorn.conf.py
import os

wsgi_app = "arena.wsgi:application"

# Worker configuration
workers = int(os.getenv("GUNICORN_WORKERS", 2))
worker_class = "sync"
timeout = int(os.getenv("GUNICORN_TIMEOUT", 60))
keepalive = 2
max_requests = 1000
max_requests_jitter = 50

# Logging
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("GUNICORN_LOG_LEVEL", "info")

proc_name = "arena-social"

bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")

# Behind the platform proxy, which also injects the identity header
forwarded_allow_ips = os.getenv("FORWARDED_ALLOW_IPS", "*")
