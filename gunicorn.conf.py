"""Gunicorn configuration for the session gateway.

Run with:
    gunicorn -c gunicorn.conf.py session_gateway.wsgi:app

Each request is independent (no server-side session store), so workers and
threads can be scaled freely. The only blocking point in a request is the
single provisioner round trip; size ``timeout`` above PROVISIONER_TIMEOUT.
"""
import os

bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.environ.get("GUNICORN_WORKERS", "2"))
threads = int(os.environ.get("GUNICORN_THREADS", "4"))
timeout = int(os.environ.get("GUNICORN_TIMEOUT", "30"))
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("LOG_LEVEL", "info").lower()

# Never log query strings containing credentials; POST /session may carry
# username/password in the query for legacy clients.
access_log_format = '%(h)s "%(m)s %(U)s %(H)s" %(s)s %(b)s %(L)ss'


def post_fork(server, worker):
    """
    Called just after a worker has been forked.

    Checks that the provisioner endpoint is configured before the worker
    imports the app, so a misconfiguration shows up once per worker in the
    gunicorn log rather than as a stack trace per request.
    """
    demo_mode = os.environ.get("DEMO_MODE", "false").lower() == "true"

    from pathlib import Path
    secret_file = Path("/run/secrets") / "provisioner_url"
    if os.environ.get("PROVISIONER_URL") or secret_file.is_file():
        worker.log.info("Provisioner endpoint configured")
        return

    if demo_mode:
        worker.log.warning("PROVISIONER_URL not set; demo mode default will be used")
    else:
        worker.log.error("PROVISIONER_URL is required when DEMO_MODE is false")
