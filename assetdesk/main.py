from __future__ import annotations

from prometheus_fastapi_instrumentator import Instrumentator

from assetdesk import create_app
from assetdesk.core.config import get_settings
from assetdesk.core.logging import configure_logging

settings = get_settings()
configure_logging(settings.LOG_LEVEL)
app = create_app(settings)
instrumentator = Instrumentator()
instrumentator.instrument(app).expose(app, include_in_schema=False)


@app.get("/health")
async def health() -> dict[str, bool]:
    return {"ok": True}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("assetdesk.main:app", host=settings.HOST, port=settings.PORT)
