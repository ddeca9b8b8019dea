"""
Gunicorn configuration for the TPO portal API

Run with: gunicorn app.main:app -c gunicorn.conf.py
"""
import os

from app.config import settings

# Server socket
bind = f"{settings.HOST}:{settings.PORT}"

# Worker processes
# With RATE_LIMIT_BACKEND=memory every worker keeps its own counters;
# use the redis backend when running more than one worker.
workers = int(os.getenv("GUNICORN_WORKERS", 2))
worker_class = "uvicorn.workers.UvicornWorker"

# Worker lifecycle
max_requests = 1000
max_requests_jitter = 100

# Timeouts (batch endpoints touch up to 200 rows)
timeout = 60
keepalive = 5
graceful_timeout = 30

proc_name = "tpo_portal_api"

# Logging (application logs go through structlog on stdout)
accesslog = "-"
errorlog = "-"
loglevel = settings.LOG_LEVEL.lower()


def when_ready(server):
    server.log.info(
        f"TPO portal ready: {workers} worker(s), rate limit backend={settings.RATE_LIMIT_BACKEND}"
    )


def worker_abort(worker):
    worker.log.warning("Worker received SIGABRT signal")
