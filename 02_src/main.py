"""Main entry point for the journey trace ingestion service."""

from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from journeytrace.api import create_fastapi_app
from journeytrace.app import Application
from journeytrace.config import ServerSettings
from journeytrace.logging_config import setup_logging


def main():
    """Run the application."""
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")
    setup_logging()

    settings = ServerSettings.from_env()
    app = create_fastapi_app(Application(settings))

    # Run with uvicorn
    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
