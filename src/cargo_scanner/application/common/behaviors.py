"""
Pipeline behaviors (middleware) for the mediator.
"""
import logging
from typing import Any

from ...domain.shared.exceptions import DomainException
from ...mediator import PipelineBehavior

logger = logging.getLogger(__name__)


class LoggingBehavior(PipelineBehavior):
    """
    Logs command/query failures and re-raises them.

    Domain errors (bad input, rejected adjustments, feed failures) are
    expected and logged without a traceback; anything else is logged with
    one. Success logs are left to the handlers.
    """

    async def handle(self, request: Any, next_handler):
        request_name = type(request).__name__

        try:
            return await next_handler()
        except DomainException as e:
            logger.warning(f"{request_name} failed: {e}")
            raise
        except Exception as e:
            logger.error(f"Failed executing {request_name}: {e}", exc_info=True)
            raise


class ValidationBehavior(PipelineBehavior):
    """
    Validates requests before handler execution.

    If the request has a validate() method, calls it.
    """

    async def handle(self, request: Any, next_handler):
        if hasattr(request, 'validate') and callable(getattr(request, 'validate')):
            request.validate()

        return await next_handler()
