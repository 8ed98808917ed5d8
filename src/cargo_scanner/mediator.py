"""
Minimal CQRS mediator.

Commands and queries are frozen dataclasses deriving from Request[T]. Each
request type maps to one handler factory; every send passes through the
registered pipeline behaviors before reaching the handler.
"""
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Generic, List, TypeVar

TRequest = TypeVar('TRequest')
TResponse = TypeVar('TResponse')


class Request(Generic[TResponse], ABC):
    """
    Base class for all requests (commands and queries).

    Example:
        @dataclass(frozen=True)
        class ListCargoQuery(Request[tuple[CargoItem, ...]]):
            pass
    """
    pass


class RequestHandler(Generic[TRequest, TResponse], ABC):
    """Base class for request handlers with a single async handle() method"""

    @abstractmethod
    async def handle(self, request: TRequest) -> TResponse:
        pass


class PipelineBehavior(ABC):
    """
    Middleware around handler execution.

    A behavior may pre-process the request, call next_handler, post-process
    the response, or handle exceptions.
    """

    @abstractmethod
    async def handle(self, request: Any, next_handler: Callable[[], Awaitable[Any]]):
        pass


class Mediator:
    """Routes requests through the behavior pipeline to their handler"""

    def __init__(self):
        self._handlers: Dict[type, Callable[[], RequestHandler]] = {}
        self._behaviors: List[PipelineBehavior] = []

    def register_handler(self, request_type: type, handler_factory: Callable[[], RequestHandler]):
        """
        Register a handler factory for a request type.

        Args:
            request_type: The request class to handle
            handler_factory: Callable that returns a handler instance
        """
        self._handlers[request_type] = handler_factory

    def register_behavior(self, behavior: PipelineBehavior):
        """Add a behavior; behaviors run in registration order"""
        self._behaviors.append(behavior)

    async def send_async(self, request: Request[TResponse]) -> TResponse:
        """
        Send a request through the pipeline to its handler.

        Raises:
            ValueError: If no handler is registered for the request type
        """
        request_type = type(request)

        if request_type not in self._handlers:
            raise ValueError(f"No handler registered for {request_type.__name__}")

        async def final_handler():
            handler = self._handlers[request_type]()
            return await handler.handle(request)

        # Wrap in reverse so the first registered behavior runs outermost
        pipeline = final_handler
        for behavior in reversed(self._behaviors):
            next_pipeline = pipeline
            pipeline = lambda b=behavior, n=next_pipeline: b.handle(request, n)

        return await pipeline()
