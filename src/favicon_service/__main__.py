import sys

import uvicorn
from loguru import logger
from pydantic import ValidationError

from favicon_service import __version__
from favicon_service.config import get_app_settings, AppSettings
from favicon_service.main import create_web_app


def __configure_logger(app_settings: AppSettings):
    logger.remove()
    logger.add(sys.stdout, level=app_settings.log_level.upper(), format=app_settings.log_fmt)
    logger.add(sys.stderr, level="ERROR", format=app_settings.log_fmt)
    logger.add("logs/log_{time}.log", level=app_settings.log_level.upper(), retention="10 days",
               format=app_settings.log_fmt)


def __load_settings() -> AppSettings:
    try:
        return get_app_settings()
    except ValidationError as e:
        logger.critical(f"Invalid configuration, AUTH_TOKEN must be set:\n{e}")
        sys.exit(1)


if __name__ == "__main__":
    app_cfg = __load_settings()
    __configure_logger(app_cfg)

    print(f"favicon-service v{__version__}")
    print(f" * listen: {app_cfg.uvicorn['host']}:{app_cfg.uvicorn['port']}\n"
          f" * fetch timeout: {app_cfg.fetch_timeout}s\n"
          f" * max body size: {app_cfg.max_body_size} bytes")

    l = logger.bind(source="core")
    l.info("Starting web host")

    web_app = create_web_app(app_cfg)
    uvicorn.run(web_app, **app_cfg.uvicorn)
