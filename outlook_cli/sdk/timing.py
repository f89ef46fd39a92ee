import time
import logging
from functools import wraps

logger = logging.getLogger(__name__)

def time_api_call(func):
    """A decorator to time Graph calls and log the duration at DEBUG."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            duration = time.perf_counter() - start_time
            label = " ".join(str(a) for a in args[1:3]) or func.__name__
            logger.debug(f"Graph call '{label}' took {duration:.4f} seconds.")
    return wrapper
