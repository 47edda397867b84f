from __future__ import annotations

import logging
from typing import Optional

from app.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    resolved = (level or settings.log_level or "INFO").upper()
    logging.basicConfig(level=resolved, format=LOG_FORMAT, datefmt="%H:%M:%S")
    logging.getLogger("app").setLevel(resolved)
    if resolved != "DEBUG":
        # boto and httpx are chatty at INFO
        for noisy in ("botocore", "boto3", "httpx", "urllib3"):
            logging.getLogger(noisy).setLevel(logging.WARNING)
