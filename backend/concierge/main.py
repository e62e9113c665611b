"""Main entry point for the listing concierge server."""

import os

import uvicorn
from dotenv import load_dotenv

from .config import Settings
from .utils.logging import logger

load_dotenv()


def main():
    """Run the listing concierge server."""
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    reload = os.getenv("RELOAD", "false").lower() == "true"

    # Fail fast on malformed settings; a missing credential only degrades the assistant route
    settings = Settings.from_env()
    if not settings.has_credential:
        logger.warning("OPENAI_API_KEY is not set; /assistant/message will answer ConfigurationMissing")

    logger.info("Starting listing concierge on %s:%s (%r)", host, port, settings)

    uvicorn.run(
        "concierge.server:app",
        host=host,
        port=port,
        reload=reload,
    )


if __name__ == "__main__":
    main()
