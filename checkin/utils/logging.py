import logging
import sys

from checkin.config import settings

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(settings.LOG_FILE, mode="a", encoding="utf-8"),
    ],
)


def get_logger(name: str):
    return logging.getLogger(name)


logger = get_logger("service_checkin")
