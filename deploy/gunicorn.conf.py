"""Gunicorn configuration for the exam evaluation service.

Usage:
    gunicorn main:app -c deploy/gunicorn.conf.py

A submission batch makes one evaluator call per answer with a throttle
delay in between, so a request can stay open for roughly
``answers x (evaluator latency + throttle interval)``.
"""

import multiprocessing
import os

# ─── Server socket ──────────────────────────────────────────────

bind = os.getenv("BIND", f"0.0.0.0:{os.getenv('SERVICE_PORT', '5000')}")
backlog = 2048

# ─── Worker processes ───────────────────────────────────────────
#
# Async ASGI workers: one per core.  Use record_store_type=mongo with more
# than one worker; the in-memory store is per process.

workers = int(os.getenv("WORKERS", min(multiprocessing.cpu_count(), 4)))
worker_class = "uvicorn.workers.UvicornWorker"

# ─── Timeouts ───────────────────────────────────────────────────
#
# Must exceed the longest expected batch.

timeout = int(os.getenv("WORKER_TIMEOUT", 300))
graceful_timeout = 60
keepalive = 5

# ─── Logging ────────────────────────────────────────────────────

accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()

proc_name = "exam-evaluation-service"


def on_starting(server):
    """Called just before the master process is initialized."""
    server.log.info(
        "Starting exam evaluation service: workers=%d, timeout=%ds, bind=%s",
        workers,
        timeout,
        bind,
    )


def worker_exit(server, worker):
    server.log.info("Worker exit (pid: %s)", worker.pid)
