import logging
from typing import Optional

from flask import Flask

from vision_relay.api.webhook import EXTENSION_KEY, api
from vision_relay.config import RelayConfig, load_config
from vision_relay.media.pipeline import UpdateDispatcher

LOG_FORMAT = "%(asctime)s %(levelname)s:%(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)
    # requests/openai debug chatter would print the bot token inside URLs
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def create_app(
    config: Optional[RelayConfig] = None,
    dispatcher: Optional[UpdateDispatcher] = None,
) -> Flask:
    """
    Build the Flask app.

    `config` defaults to load_config() (environment + .env). `dispatcher`
    can be injected to swap the outbound clients, e.g. in tests.
    """
    if config is None:
        config = load_config()

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = config.max_upload_bytes
    app.config["RELAY_CHAT_ID"] = config.chat_id

    app.extensions[EXTENSION_KEY] = dispatcher or UpdateDispatcher.from_config(config)
    app.register_blueprint(api)
    return app
