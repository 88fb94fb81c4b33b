"""
Server entry point.

Usage:
    taskflow-server
    python -m server.app.main
"""
import asyncio

from loguru import logger

from server.app.bootstrap import BootstrapSequencer
from server.app.core import SERVICE_NAME


def _log(event: str) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event).info("")


async def run_server() -> None:
    await BootstrapSequencer().run()


def main() -> None:
    try:
        asyncio.run(run_server())
    except KeyboardInterrupt:
        _log("server_interrupted")
    except Exception as e:
        logger.exception("server failed: {}", e)
        raise


if __name__ == "__main__":
    main()
