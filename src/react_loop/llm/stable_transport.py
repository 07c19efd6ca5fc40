from typing import Any, Callable, Dict, Optional, Tuple

from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)


class StableTransportError(Exception):
    """Raised when StableTransport exhausts its attempts."""


class StableTransport:
    """Wraps a model call with opt-in retries for connection faults.

    With the default single attempt the callable is invoked directly and
    its exceptions propagate unchanged.
    """

    def __init__(
        self,
        call: Callable[..., Any],
        retry_exceptions: Optional[Tuple[type[Exception], ...]] = None,
        max_attempts: int = 1,
        wait_strategy: Optional[Any] = None,
    ) -> None:
        """Initialize the transport wrapper.

        Args:
            call: Callable performing one model request.
            retry_exceptions: Exception types eligible for retry.
            max_attempts: Maximum attempts including the initial call.
            wait_strategy: Tenacity wait strategy for backoff.
        """

        self._call = call
        self._retry_exceptions = retry_exceptions or ()
        self._max_attempts = max(1, max_attempts)
        self._wait_strategy = wait_strategy or wait_fixed(0)

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def complete(self, call_args: Dict[str, Any]) -> Any:
        """Execute the call, retrying eligible faults.

        Args:
            call_args: Keyword arguments for the callable.

        Returns:
            Whatever the callable returns.

        Raises:
            StableTransportError: When every attempt failed with a
                retryable fault.
        """

        if self._max_attempts == 1 or not self._retry_exceptions:
            return self._call(**call_args)

        retrying = Retrying(
            stop=stop_after_attempt(self._max_attempts),
            retry=retry_if_exception_type(self._retry_exceptions),
            wait=self._wait_strategy,
            reraise=False,
        )
        try:
            return retrying(self._call, **call_args)
        except RetryError as exc:
            last = exc.last_attempt.exception()
            raise StableTransportError(
                f"Model call failed after {self._max_attempts} attempts: {last}"
            ) from last
