import logging
import os
from typing import Dict

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .logging_config import configure_logging
from .profile_routes import router as profile_router
from .progress_routes import router as progress_router


configure_logging()
logger = logging.getLogger(__name__)
app = FastAPI(title="Fitness Tracker Backend", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(profile_router)
app.include_router(progress_router)

settings_snapshot = get_settings()
logger.info("Backend starting with persistence mode: %s", settings_snapshot.persistence_mode)
logger.info("OpenAI API key configured: %s", bool(settings_snapshot.openai_api_key))


@app.get("/healthz")
def health(settings: Settings = Depends(get_settings)) -> Dict[str, str]:
    return {"status": "ok", "persistence_mode": settings.persistence_mode}


def run() -> None:
    import uvicorn

    host = os.getenv("FITTRACK_HOST", "127.0.0.1")
    port = int(os.getenv("FITTRACK_PORT", "8000"))
    logger.info("Starting fittrack API on %s:%s", host, port)
    uvicorn.run(app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    run()
