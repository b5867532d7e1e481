"""Entry point: ``python -m linktrace`` or the ``linktrace`` console script."""

import uvicorn

from linktrace.common.logging import get_logger
from linktrace.common.config import get_config

logger = get_logger(__name__)


def main():
    """Main entry point."""
    config = get_config()
    logger.info(f"LinkTrace starting in {config.environment.value} mode")
    logger.info(
        f"Retention: {config.retention}, sweep interval: {config.sweep_interval}"
    )
    uvicorn.run(
        "linktrace.api.gateway:app",
        host=config.api_host,
        port=config.api_port,
        log_level=config.log_level.value.lower(),
    )


if __name__ == "__main__":
    main()
