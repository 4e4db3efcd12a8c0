import argparse
import logging
import sys

import uvicorn

from .api.app import init_app
from .common.exceptions import ConfigurationError
from .core.config import ServerConfig

logger = logging.getLogger(__name__)


def main():
    """Main entry point with argument parsing"""
    parser = argparse.ArgumentParser(description="Guirlande server")
    parser.add_argument("--config", default=None, help="YAML configuration file")
    parser.add_argument("--host", default=None, help="Override network.host")
    parser.add_argument("--port", type=int, default=None, help="Override network.port")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        config = ServerConfig.load(args.config)
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    host = args.host or config.network.host
    port = args.port or config.network.port
    logger.info(f"Serving on {host}:{port} ({config.environment})")
    uvicorn.run(init_app(config=config), host=host, port=port, log_level=args.log_level.lower())


if __name__ == "__main__":
    main()
