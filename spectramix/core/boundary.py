"""
Computation boundary for SpectraMix.

Transform requests are executed by a worker on an executor pool so that
the (potentially expensive) transform never blocks the caller. Each
request gets exactly one response, correlated by request id, delivered
through a future.
"""

import asyncio
import concurrent.futures
import itertools
import logging
import threading
from concurrent.futures import Future, ProcessPoolExecutor, ThreadPoolExecutor
from typing import Any, Dict, Optional

from spectramix.core.models import (
    ComplexSignal,
    ErrorDescriptor,
    Operation,
    TransformInput,
    TransformRequest,
    TransformResponse,
)
from spectramix.core.transform import TransformEngine, create_transform_engine
from spectramix.utils.config import EXECUTOR_KINDS
from spectramix.utils.errors import (
    ConfigurationError,
    ProtocolViolationError,
    TransformTimeoutError,
)
from spectramix.utils.logging import create_logger_with_context


class TransformWorker:
    """
    Serves transform requests with one engine.

    Failures never escape handle(): they are turned into an error
    response so every request is answered exactly once.
    """

    def __init__(self, engine: TransformEngine):
        self.engine = engine
        self.logger = logging.getLogger("boundary.worker")

    def handle(self, request: TransformRequest) -> TransformResponse:
        """Run one request and describe its outcome."""
        log = create_logger_with_context(
            "boundary.worker", {"request_id": request.id}
        )
        log.debug(f"Request received: {request.operation.value} (N={len(request.data)})")

        try:
            if request.operation is Operation.FORWARD:
                result = self.engine.fft(request.data)
            else:
                result = self.engine.ifft(request.data)
        except Exception as e:
            log.error(f"{request.operation.value} failed: {e}")
            return TransformResponse(
                id=request.id,
                operation=request.operation,
                error=ErrorDescriptor.from_exception(e),
            )

        log.debug("Request complete")
        return TransformResponse(id=request.id, operation=request.operation, result=result)

    def handle_message(self, message: Any) -> Dict[str, Any]:
        """
        Wire-level entry point: dict request in, dict response out.

        Malformed requests (missing fields, unknown operation or data
        kind) are answered with an error response echoing whatever id
        and operation the message carried.
        """
        try:
            request = TransformRequest.from_dict(message)
        except Exception as e:
            self.logger.error(f"Failed to parse request: {e}")
            echo = message if isinstance(message, dict) else {}
            return {
                'id': echo.get('id'),
                'operation': echo.get('operation'),
                'result': None,
                'error': ErrorDescriptor.from_exception(e).to_dict(),
            }
        return self.handle(request).to_dict()


# Per-process worker for ProcessPoolExecutor; each process owns its engine
_process_worker: Optional[TransformWorker] = None


def _init_process_worker(config: Optional[Dict[str, Any]]) -> None:
    global _process_worker
    _process_worker = TransformWorker(create_transform_engine(config))


def _handle_in_process(request: TransformRequest) -> TransformResponse:
    if _process_worker is None:
        _init_process_worker(None)
    return _process_worker.handle(request)


def resolve_response(
    request: TransformRequest, response: Optional[TransformResponse]
) -> ComplexSignal:
    """
    Check a response against its request and unwrap the result.

    Raises:
        ProtocolViolationError: If the response is missing, belongs to
            another request, or carries both or neither of result and error
        SpectraMixError: The worker's own failure, rebuilt from its descriptor
    """
    if not isinstance(response, TransformResponse):
        raise ProtocolViolationError(
            f"No valid response for request {request.id}", request_id=request.id
        )
    if response.id != request.id:
        raise ProtocolViolationError(
            f"Response id {response.id!r} does not match request id {request.id!r}",
            request_id=request.id,
        )
    if response.result is None and response.error is None:
        raise ProtocolViolationError(
            "Response carries neither result nor error", request_id=request.id
        )
    if response.result is not None and response.error is not None:
        raise ProtocolViolationError(
            "Response carries both result and error", request_id=request.id
        )
    if response.error is not None:
        raise response.error.to_exception()
    return response.result


class ComputationBoundary:
    """
    Dispatches transform requests to an executor pool.

    Design:
    - One future per request; ids are unique per boundary
    - Thread pools share one worker whose engine cache is lock-guarded
    - Process pools give every process its own engine
    - Optional timeout surfaces as TransformTimeoutError
    """

    def __init__(
        self,
        engine: Optional[TransformEngine] = None,
        executor: str = "thread",
        max_workers: int = 4,
        timeout: Optional[float] = None,
        transform_config: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize computation boundary.

        Args:
            engine: Engine used by thread workers (built from config if None)
            executor: "thread" or "process"
            max_workers: Max parallel workers
            timeout: Default seconds to wait for a response (None waits forever)
            transform_config: Configuration used to build engines
        """
        if executor not in EXECUTOR_KINDS:
            raise ConfigurationError(
                f"Unknown executor kind: {executor}", config_key="boundary.executor"
            )
        if max_workers < 1:
            raise ConfigurationError(
                f"max_workers must be at least 1, got {max_workers}",
                config_key="boundary.max_workers",
            )

        self.executor_kind = executor
        self.timeout = timeout
        self.worker: Optional[TransformWorker] = None
        if executor == "process":
            self.executor: concurrent.futures.Executor = ProcessPoolExecutor(
                max_workers=max_workers,
                initializer=_init_process_worker,
                initargs=(transform_config,),
            )
        else:
            self.worker = TransformWorker(engine or create_transform_engine(transform_config))
            self.executor = ThreadPoolExecutor(max_workers=max_workers)

        self._ids = itertools.count(1)
        self._id_lock = threading.Lock()
        self.logger = logging.getLogger("boundary")

    def new_request(self, operation: Operation, data: TransformInput) -> TransformRequest:
        """Build a request with a fresh correlation id."""
        operation = Operation.parse(operation)
        with self._id_lock:
            request_id = f"{operation.value}-{next(self._ids)}"
        return TransformRequest(id=request_id, operation=operation, data=data)

    def submit(self, request: TransformRequest) -> "Future[TransformResponse]":
        """Dispatch a request; the future resolves to its response."""
        self.logger.debug(f"Dispatching {request.id}")
        if self.worker is not None:
            return self.executor.submit(self.worker.handle, request)
        return self.executor.submit(_handle_in_process, request)

    async def request(
        self,
        operation: Operation,
        data: TransformInput,
        timeout: Optional[float] = None,
    ) -> ComplexSignal:
        """
        Run a transform without blocking the event loop.

        Args:
            operation: Operation.FORWARD or Operation.INVERSE
            data: Transform input
            timeout: Seconds to wait (defaults to the boundary timeout)

        Returns:
            ComplexSignal: The transform result

        Raises:
            TransformTimeoutError: If no response arrives in time
            ProtocolViolationError: If the response breaks the contract
            SpectraMixError: Whatever the transform raised in the worker
        """
        request = self.new_request(operation, data)
        timeout = self.timeout if timeout is None else timeout
        future = self.submit(request)

        try:
            response = await asyncio.wait_for(asyncio.wrap_future(future), timeout)
        except asyncio.TimeoutError:
            future.cancel()
            self.logger.error(f"{request.id} timed out after {timeout}s")
            raise TransformTimeoutError(
                f"No response for {request.id} within {timeout}s",
                request_id=request.id,
                timeout=timeout,
            ) from None

        return resolve_response(request, response)

    async def forward(self, data: TransformInput, timeout: Optional[float] = None) -> ComplexSignal:
        """Forward transform across the boundary."""
        return await self.request(Operation.FORWARD, data, timeout)

    async def inverse(self, data: TransformInput, timeout: Optional[float] = None) -> ComplexSignal:
        """Inverse transform across the boundary."""
        return await self.request(Operation.INVERSE, data, timeout)

    def call(
        self,
        operation: Operation,
        data: TransformInput,
        timeout: Optional[float] = None,
    ) -> ComplexSignal:
        """Blocking variant of request() for callers without an event loop."""
        request = self.new_request(operation, data)
        timeout = self.timeout if timeout is None else timeout
        future = self.submit(request)
        try:
            response = future.result(timeout=timeout)
        except concurrent.futures.TimeoutError:
            future.cancel()
            raise TransformTimeoutError(
                f"No response for {request.id} within {timeout}s",
                request_id=request.id,
                timeout=timeout,
            ) from None
        return resolve_response(request, response)

    def shutdown(self) -> None:
        """Shutdown executor gracefully."""
        self.logger.info("Shutting down computation boundary")
        self.executor.shutdown(wait=True)

    def __enter__(self) -> "ComputationBoundary":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown()


def create_boundary(config: Optional[Dict[str, Any]] = None) -> ComputationBoundary:
    """
    Factory function to create a ComputationBoundary from configuration.

    Args:
        config: Optional full configuration dict (uses "boundary" and "transform")

    Returns:
        ComputationBoundary: Configured boundary
    """
    config = config or {}
    section = config.get('boundary', {})
    return ComputationBoundary(
        executor=section.get('executor', 'thread'),
        max_workers=section.get('max_workers', 4),
        timeout=section.get('timeout'),
        transform_config={'transform': config.get('transform', {})},
    )
