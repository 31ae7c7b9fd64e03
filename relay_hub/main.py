import logging
import os
from typing import Optional

import tornado.ioloop
import tornado.web

from relay_hub.config import RelaySettings
from relay_hub.handlers import (
    CommandPollHandler,
    CommandSubmitHandler,
    DocsHandler,
    HealthHandler,
    ImageUploadHandler,
    IndexHandler,
    RelayWebSocketHandler,
)
from relay_hub.services.relay import RelayHub


def make_app(hub: Optional[RelayHub] = None) -> tornado.web.Application:
    hub = hub or RelayHub(RelaySettings.from_env())
    deps = dict(hub=hub)

    return tornado.web.Application(
        [
            (r"/", IndexHandler),
            (r"/health", HealthHandler, deps),
            (r"/docs", DocsHandler),
            (r"/ws", RelayWebSocketHandler, deps),
            (r"/command", CommandSubmitHandler, deps),
            (r"/device/([^/]+)/commands", CommandPollHandler, deps),
            (r"/upload", ImageUploadHandler, deps),
        ]
    )


def setup_logger(name, level="INFO"):
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)
        logger.setLevel(level)
    return logger


def main() -> None:
    settings = RelaySettings.from_env()
    logger = setup_logger("relay_hub", settings.log_level)
    logger.info(f"Started server process {os.getpid()}")
    hub = RelayHub(settings)
    app = make_app(hub)
    logger.info("Waiting for application startup...")
    app.listen(port=settings.port, address=settings.address)
    hub.start()
    logger.info("Application startup complete.")
    logger.info(f"Relay running on http://{settings.address}:{settings.port} (Press Ctrl+C to quit)")
    try:
        tornado.ioloop.IOLoop.current().start()
    finally:
        hub.stop()


if __name__ == "__main__":
    main()
