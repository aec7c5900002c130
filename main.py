"""
Vet Appointment Notifications API
Server entrypoint: `python main.py` or `uvicorn main:app`
"""

import uvicorn

from app.core.config import settings
from app.main import app  # noqa: F401

if __name__ == "__main__":
    uvicorn.run(
        # Use import string so reload/workers work correctly (and avoid warnings).
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower()
    )
