import logging
from contextlib import asynccontextmanager
from typing import Optional
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from careshift.api.routes import schedule
from careshift.core.config import settings
from careshift.core.logger import configure_logging
from careshift.services.webhook import WebhookClient

logger = logging.getLogger(__name__)


def create_app(webhook_client: Optional[WebhookClient] = None) -> FastAPI:
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = webhook_client or WebhookClient.from_settings()
        app.state.webhook_client = client
        try:
            yield
        finally:
            client.close()

    app = FastAPI(title="CareShift API", version="0.1.0", lifespan=lifespan)

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request.state.request_id = str(uuid4())
        response = await call_next(request)
        if settings.ALLOW_ORIGIN:
            response.headers["Access-Control-Allow-Origin"] = settings.ALLOW_ORIGIN
            response.headers["Vary"] = "Origin"
        return response

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        request_id = getattr(request.state, "request_id", "-")
        logger.exception(f"[{request_id}] Unhandled error: {exc}")
        return JSONResponse(status_code=500, content={"detail": "Unable to process request."})

    app.include_router(schedule.router)

    @app.get("/health")
    def health_check():
        return {"ok": True}

    @app.get("/", response_class=PlainTextResponse)
    def root():
        return "Server online"

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
