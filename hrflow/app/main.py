"""FastAPI request workflow service.

Exposes the request lifecycle to the HR platform's UI:
- submission of every request type through one endpoint
- single-decision approve/reject with at-most-once semantics
- fulfilment steps for logistics and document requests
- pending queues, requester histories, and dashboard counts

Run with: uvicorn hrflow.app.main:create_app --factory
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from hrflow.api.core.container import Container
from hrflow.api.errors import register_exception_handlers
from hrflow.api.routes import register_routes
from hrflow.config import Settings
from hrflow.db.connection import build_engine, build_session_factory, init_db
from hrflow.observability.tracing import log_event, new_trace_id

tags_metadata = [
    {
        "name": "Requests",
        "description": "Submit, decide, fulfil, and list requests"
    },
    {
        "name": "Health",
        "description": "Liveness probe"
    }
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Shutdown: drain queued notifications, then release DB connections."""
    yield
    app.state.container.close()
    app.state.engine.dispose()
    log_event('app.stopped', trace_id=new_trace_id())


def create_app(settings: Settings | None = None, *, container: Container | None = None) -> FastAPI:
    """Create the application.

    Configuration comes from HRFLOW_* environment variables (or a .env file)
    unless explicit settings are passed in.
    """
    settings = settings or Settings()

    app = FastAPI(
        title='HR Request Workflow',
        version='1.0.0',
        description='Request lifecycle and approval workflow engine',
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )

    engine = build_engine(settings.database_url)
    init_db(engine)
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.container = container or Container(settings)

    register_exception_handlers(app)
    register_routes(app)

    log_event(
        'app.started',
        trace_id=new_trace_id(),
        database=engine.url.render_as_string(hide_password=True),
        notifications=bool(settings.notification_base_url),
        target_resolver=bool(settings.target_resolver_url),
    )
    return app
