import logging

from error_mapper.core.config import settings

logger = logging.getLogger("error-mapper")
logger.setLevel(getattr(logging, settings.LOG_LEVEL, logging.INFO))

handler = logging.StreamHandler()
formatter = logging.Formatter(
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
handler.setFormatter(formatter)

if not logger.handlers:
    logger.addHandler(handler)
