"""
Entry Point for Cloud Server Deployment

Starts the FastAPI server with uvicorn, bound to the PORT environment
variable that most hosting platforms set.

Runs a single worker process on purpose: the count cache and rate
locks live in process memory and are not shared between workers.
"""

import logging
import sys

import uvicorn

from xcount.core.config import settings

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)


def main():
    """Run the API server until interrupted."""
    port = settings.server_port

    print("=" * 70)
    print("X COUNT PROXY")
    print("=" * 70)
    print(f"Binding to 0.0.0.0:{port}")
    print(f"Docs: http://localhost:{port}/docs")
    print("=" * 70)

    logger.info(f"Starting FastAPI server on 0.0.0.0:{port}...")
    try:
        uvicorn.run(
            "xcount.main:app",
            host="0.0.0.0",
            port=port,
            workers=1,
            log_level="info",
            access_log=True
        )
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")


if __name__ == "__main__":
    main()
