"""FastAPI application wiring for the verification queue gateway.

Beginner terms used in this file:
- FastAPI app: the main web application object.
- Route/path operation: a function exposed over HTTP (for example, GET /status).
- Form field: a value sent as application/x-www-form-urlencoded request data.
- app.state: a place to store shared runtime objects (settings, queue client).

Handlers are plain `def` functions, so FastAPI runs each one in its worker
thread pool and the blocking queue call only holds up that request.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Form, HTTPException, Path
from fastapi.responses import PlainTextResponse

from .app.config import Settings, get_settings
from .app.errors import ExternalInvocationError, GatewayError, TaskNotFoundError, ValidationError
from .app.models import EnqueueRequest, StatusDisplayable, TaskDisplayable
from .app.queue_client import PueueCliClient, QueueClient
from .app.shaper import build_listing, project_log
from .app.ui import render_usage
from .app.validators import validate_enqueue

logger = logging.getLogger(__name__)


def create_app(
    *,
    settings_override: Settings | None = None,
    queue_client: QueueClient | None = None,
) -> FastAPI:
    """Application factory.

    This pattern builds and returns a fully configured FastAPI app instance.
    It is useful for tests because each test can create a fresh app with a
    fake queue client.
    """
    settings = settings_override or get_settings()

    # Fail fast if required configuration is missing. The value itself is
    # not used by any route.
    if not settings.mongodb_uri.strip():
        raise RuntimeError("MONGODB_URI is required.")

    logging.getLogger("verification_api").setLevel(settings.log_level.upper())

    app = FastAPI(title=settings.app_name, version="0.1.0")
    app.state.settings = settings
    app.state.queue_client = queue_client or PueueCliClient(
        program=settings.queue_program,
        job_name=settings.job_name,
        timeout_s=settings.queue_timeout_s,
    )

    @app.get("/health")
    @app.get("/healthz")
    @app.get("/live")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/", response_class=PlainTextResponse)
    def usage() -> str:
        return render_usage()

    @app.get("/status", response_model=StatusDisplayable)
    def get_status() -> StatusDisplayable:
        try:
            status = app.state.queue_client.list_status()
        except GatewayError as exc:
            raise _to_http_exception(exc) from exc
        return build_listing(status.tasks)

    @app.get("/status/{task_id}", response_model=TaskDisplayable)
    def get_status_for_id(task_id: int = Path(ge=0)) -> TaskDisplayable:
        try:
            entry = app.state.queue_client.get_log(task_id)
        except GatewayError as exc:
            raise _to_http_exception(exc) from exc
        return project_log(entry)

    # Empty optional form fields arrive as None.
    @app.post("/enqueue", response_class=PlainTextResponse)
    def enqueue(
        repo: str = Form(...),
        commit: str = Form("HEAD"),
        optimizer: str | None = Form(None),
        code_id: int | None = Form(None),
        chain_id: str | None = Form(None),
        lcd: str | None = Form(None),
    ) -> str:
        job = EnqueueRequest(
            repo=repo,
            commit=commit,
            optimizer=optimizer,
            code_id=code_id,
            chain_id=chain_id,
            lcd=lcd,
        )
        try:
            # Reject bad input before the queue program is ever started.
            validate_enqueue(job)
            output = app.state.queue_client.enqueue(job)
        except GatewayError as exc:
            raise _to_http_exception(exc) from exc
        logger.info("enqueue event=accepted repo=%s commit=%s", job.repo, job.commit)
        return output

    return app


def _to_http_exception(exc: GatewayError) -> HTTPException:
    """Map gateway errors to HTTP status codes."""
    if isinstance(exc, ValidationError):
        logger.info("request event=rejected reason=%s", exc)
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, TaskNotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ExternalInvocationError):
        logger.error("request event=queue_failed reason=%s stderr=%s", exc, exc.stderr)
        return HTTPException(status_code=502, detail="Task queue invocation failed")
    logger.error("request event=unexpected_error reason=%s", exc)
    return HTTPException(status_code=500, detail="Internal error")


# Module-level app for `uvicorn verification_api.main:app`.
app = create_app()
