"""Decorador de perfilado de endpoints"""
import logging
import time
from functools import wraps
from typing import Any, Callable

logger = logging.getLogger(__name__)


def profile_endpoint(func: Callable) -> Callable:
    """
    Mide el tiempo de ejecución de un endpoint asíncrono.

    Solo cubre SQL y lógica; la serialización de la respuesta ocurre
    después, dentro de FastAPI.
    """
    @wraps(func)
    async def wrapper(*args, **kwargs) -> Any:
        start_time = time.perf_counter()
        result = await func(*args, **kwargs)
        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(f"⏱️ {func.__name__}: {elapsed_ms:.2f}ms")
        return result
    return wrapper
