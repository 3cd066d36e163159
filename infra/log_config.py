import logging
from infra.settings import settings

def setup_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    # httpx logs every request at INFO, including the device token in the URL.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    for uv_logger in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(uv_logger).setLevel(settings.LOG_LEVEL)
