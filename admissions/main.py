import logging

from fastapi import FastAPI

from admissions.api.v1.funnels import router as funnels_router
from admissions.core.config import settings

class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("session_id", "subject_id", "step", "status", "option_count", "application_id", "error"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

app = FastAPI(title="Admissions Program Selection", version="1.0.0")

app.include_router(funnels_router, prefix="/api/v1", tags=["funnels"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
