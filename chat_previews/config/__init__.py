"""Application configuration"""

import logging
from dotenv import load_dotenv

from .loader import load_raw_config
from .prefetch import Prefetch

load_dotenv()

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s]: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logging.basicConfig(format=LOG_FORMAT, datefmt=DATE_FORMAT, level=logging.INFO)
logging.getLogger("aiohttp.access").setLevel(logging.WARNING)

_RAW_CONFIG = load_raw_config()

prefetch = Prefetch(_RAW_CONFIG)


class Config:
    prefetch = prefetch


__all__ = ["prefetch", "Prefetch", "Config", "load_raw_config"]
