import functools
import logging
from utils.exceptions import ModelSearchException

def handle_engine_errors(operation_name: str):
    """Decorator for consistent error logging in engines. Errors are re-raised unchanged."""
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ModelSearchException as e:
                logger = args[0].logger if args and hasattr(args[0], 'logger') else logging.getLogger()
                logger.error(f"{operation_name} aborted: {e}")
                raise
            except Exception as e:
                # Backend failures (numeric, convergence) keep their original type
                logger = args[0].logger if args and hasattr(args[0], 'logger') else logging.getLogger()
                logger.error(f"{operation_name} failed: {e}", exc_info=True)
                raise
        return wrapper
    return decorator
