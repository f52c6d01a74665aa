"""FastAPI entry point for the exam evaluation service."""

import logging
from contextlib import asynccontextmanager
from functools import partial

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import get_settings
from services.evaluator_client import EvaluatorClient
from services.middleware import RequestIdMiddleware, configure_logging
from services.record_store import create_record_store
from services.throttle import create_throttle

logger = logging.getLogger(__name__)

settings = get_settings()
configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle: open/close the store and evaluator client."""
    store = create_record_store(settings)
    if await store.ping():
        logger.info("Record store connection verified")
    else:
        logger.warning("Record store unreachable; requests will fail until it recovers")

    evaluator = EvaluatorClient(settings)
    await evaluator.start()

    app.state.record_store = store
    app.state.evaluator = evaluator
    app.state.throttle_factory = partial(create_throttle, settings)

    yield

    await evaluator.close()
    await store.close()


app = FastAPI(
    title="Exam Evaluation Service",
    description="Publish exams, evaluate free-text answers, and query results",
    version="1.0.0",
    lifespan=lifespan,
)

# ── Middleware stack (outermost first) ─────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIdMiddleware)

# ── Register routers ────────────────────────────────────────
from api.health import router as health_router  # noqa: E402
from api.exams import router as exams_router  # noqa: E402
from api.questions import router as questions_router  # noqa: E402
from api.submissions import router as submissions_router  # noqa: E402

app.include_router(health_router)
app.include_router(exams_router)
app.include_router(questions_router)
app.include_router(submissions_router)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.service_port,
        reload=settings.debug,
    )
