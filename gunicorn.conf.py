"""
Gunicorn configuration for production.

Usage:
    gunicorn -c gunicorn.conf.py wsgi:app

Sync workers share one SQLite file in the instance folder; the
connection runs in WAL mode so readers do not block the writer.
"""

import multiprocessing
import os

bind = os.environ.get('GUNICORN_BIND', '0.0.0.0:8000')

# 2 * cores + 1, capped: SQLite allows a single writer at a time.
workers = min(multiprocessing.cpu_count() * 2 + 1, 4)
worker_class = 'sync'

# Image uploads up to 5MB over slow links.
timeout = 60
graceful_timeout = 10
keepalive = 2

max_requests = 1000
max_requests_jitter = 50

limit_request_line = 8190
limit_request_fields = 50
limit_request_field_size = 8190

# Access log without bodies, cookies or authorization headers.
accesslog = '-'
errorlog = '-'
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" %(L)s'
loglevel = os.environ.get('LOG_LEVEL', 'info')

proc_name = 'recipeshare'

# Trust X-Forwarded-* only from the reverse proxy.
forwarded_allow_ips = os.environ.get('FORWARDED_ALLOW_IPS', '127.0.0.1')
