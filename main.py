import logging
import sys

from vision_relay.config import load_config
from vision_relay.errors import ConfigError
from vision_relay.main import configure_logging, create_app


def main() -> None:
    try:
        config = load_config()
    except ConfigError as e:
        configure_logging()
        logging.critical("❌ %s", e)
        sys.exit(1)

    configure_logging(config.log_level)
    app = create_app(config)

    logging.info("🚀 Starting server on port %s", config.port)
    app.run(host="0.0.0.0", port=config.port, threaded=True)


if __name__ == "__main__":
    main()
