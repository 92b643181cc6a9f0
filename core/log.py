# core/log.py
import logging
from pathlib import Path

ROOT_NAMES = ("core", "exporters", "gui")
_FORMAT = "%(asctime)s [%(levelname)s] %(name)s %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_setup_done = False


def setup_logging(level: int = logging.INFO, log_file: str | Path | None = None):
    """
    Configura los loggers de la aplicación: consola y, opcionalmente, archivo.
    Idempotente; se llama una vez al arrancar.
    """
    global _setup_done
    if _setup_done:
        return

    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT)
    handlers = [logging.StreamHandler()]
    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    for name in ROOT_NAMES:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        for handler in handlers:
            logger.addHandler(handler)

    _setup_done = True
