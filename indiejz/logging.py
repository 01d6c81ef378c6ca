"""
Configuração de logging.
Níveis do uvicorn e dos loggers da loja; falhas de provedor usam logger.exception (indiejz/services).
"""
import logging
import sys


def setup_logging(
    level: int | str = logging.INFO,
    format_string: str | None = None,
) -> None:
    if format_string is None:
        format_string = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    logging.basicConfig(
        level=level,
        format=format_string,
        stream=sys.stdout,
        force=True,
    )
    # Uvicorn: access e error no mesmo nível
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        log = logging.getLogger(name)
        if level is not None:
            log.setLevel(level)
    logging.getLogger("indiejz").setLevel(level)
    # SQLAlchemy só avisa; o echo de SQL fica desligado
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
