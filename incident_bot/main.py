from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from incident_bot.api import router as slack_router
from incident_bot.config import settings
from incident_bot.integrations.registry import build_integrations

structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(0),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("starting up")
    app.state.integrations = build_integrations(settings)
    yield
    log.info("shut down")


app = FastAPI(title="Incident Bot", version="0.1.0", lifespan=lifespan)

app.include_router(slack_router)


@app.get("/health")
async def health():
    integrations = app.state.integrations
    return {
        "status": "ok",
        "integrations": {
            capability.name: capability.available
            for capability in (
                integrations.slack,
                integrations.llm,
                integrations.jira,
                integrations.confluence,
            )
        },
    }
