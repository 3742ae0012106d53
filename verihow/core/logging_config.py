import logging

from verihow.core.settings import settings

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    resolved = str(level or settings.log_level or "INFO").strip().upper()
    if not isinstance(logging.getLevelName(resolved), int):
        resolved = "INFO"
    logging.basicConfig(level=resolved, format=_LOG_FORMAT)
    logging.getLogger(__name__).debug("logging configured: level=%s", resolved)
