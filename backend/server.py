"""Process entry point: `python server.py` from backend/ (reads .env here)."""

import logging
import os

import uvicorn
from dotenv import load_dotenv

# Load .env from backend dir before the app reads its settings
load_dotenv(os.path.join(os.path.dirname(__file__), ".env"))

from app.config import load_settings  # noqa: E402
from app.main import create_app  # noqa: E402

settings = load_settings()
logging.basicConfig(level=settings.log_level)
app = create_app(settings)


def main() -> None:
    logging.getLogger(__name__).info("API listening on http://localhost:%d", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
