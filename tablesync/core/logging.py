"""
Configuracion de logging (loguru) para procesos de ingesta.
"""
import sys

from loguru import logger

from tablesync.core.config import Settings


def configure_logging(settings: Settings) -> None:
    """
    Reinstala los sinks de loguru segun la configuracion.

    - stderr siempre, con el nivel LOG_LEVEL
    - archivo rotativo si LOG_FILE esta definido
    """
    logger.remove()
    logger.add(
        sys.stderr,
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {name}:{function} | {message}",
        level=settings.LOG_LEVEL,
    )
    
    if settings.LOG_FILE:
        logger.add(
            settings.LOG_FILE,
            rotation="500 MB",
            retention="10 days",
            level=settings.LOG_LEVEL
        )
    
    logger.info(f"Logging configurado para {settings.APP_NAME} (nivel {settings.LOG_LEVEL})")
