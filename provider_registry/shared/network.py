"""JSON-RPC utilities for Provider Registry with timeout handling and retry logic.

Only idempotent reads go through the retry loop. Transaction submission is
never retried here, a failed send surfaces to the caller as-is.
"""

import itertools
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, TypeVar

import requests
from requests.exceptions import ConnectionError, HTTPError, Timeout

logger = logging.getLogger(__name__)

T = TypeVar("T")


class NetworkErrorType(Enum):
    TIMEOUT = "timeout"
    CONNECTION_ERROR = "connection_error"
    HTTP_ERROR = "http_error"
    RPC_ERROR = "rpc_error"
    UNKNOWN = "unknown"


@dataclass
class NetworkError(Exception):
    error_type: NetworkErrorType
    message: str
    original_error: Exception | None = None
    status_code: int | None = None
    response_text: str | None = None
    rpc_code: int | None = None

    def __str__(self) -> str:
        return self.message


class JsonRpcError(Exception):
    """Error object returned inside a JSON-RPC response body."""

    def __init__(self, code: int | None, message: str, data: Any = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data


@dataclass
class TimeoutConfig:
    connect_timeout: float = 5.0
    read_timeout: float = 15.0
    operation_timeout: float = 30.0

    @property
    def request_timeout(self) -> tuple[float, float]:
        return (self.connect_timeout, self.read_timeout)


@dataclass
class RetryConfig:
    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    exponential_base: float = 2.0
    retryable_status_codes: set[int] = field(
        default_factory=lambda: {408, 429, 500, 502, 503, 504}
    )

    def calculate_delay(self, attempt: int) -> float:
        delay = self.base_delay * (self.exponential_base**attempt)
        return min(delay, self.max_delay)


DEFAULT_TIMEOUT_CONFIG = TimeoutConfig()
DEFAULT_RETRY_CONFIG = RetryConfig()


def classify_error(error: Exception) -> NetworkErrorType:
    if isinstance(error, Timeout):
        return NetworkErrorType.TIMEOUT
    elif isinstance(error, ConnectionError):
        return NetworkErrorType.CONNECTION_ERROR
    elif isinstance(error, HTTPError):
        return NetworkErrorType.HTTP_ERROR
    elif isinstance(error, JsonRpcError):
        return NetworkErrorType.RPC_ERROR
    return NetworkErrorType.UNKNOWN


def create_network_error(
    error: Exception, rpc_url: str, context: str = ""
) -> NetworkError:
    error_type = classify_error(error)
    context_prefix = f"{context}: " if context else ""

    if error_type == NetworkErrorType.TIMEOUT:
        message = (
            f"{context_prefix}Connection timeout. RPC node may be unavailable: {rpc_url}"
        )
    elif error_type == NetworkErrorType.CONNECTION_ERROR:
        message = (
            f"{context_prefix}Cannot connect to RPC node: {rpc_url}. "
            "Check your network connection."
        )
    elif error_type == NetworkErrorType.HTTP_ERROR:
        status_code = getattr(error.response, "status_code", None)
        response_text = getattr(error.response, "text", None)
        message = f"{context_prefix}HTTP error {status_code}: {response_text or 'Unknown error'}"
        return NetworkError(
            error_type=error_type,
            message=message,
            original_error=error,
            status_code=status_code,
            response_text=response_text,
        )
    elif error_type == NetworkErrorType.RPC_ERROR:
        rpc_code = getattr(error, "code", None)
        return NetworkError(
            error_type=error_type,
            message=f"{context_prefix}RPC error {rpc_code}: {error}",
            original_error=error,
            rpc_code=rpc_code,
        )
    else:
        message = f"{context_prefix}Network error: {str(error)}"

    return NetworkError(
        error_type=error_type,
        message=message,
        original_error=error,
    )


def should_retry(error: Exception, retry_config: RetryConfig) -> bool:
    if isinstance(error, Timeout):
        return True
    if isinstance(error, ConnectionError):
        return True
    if isinstance(error, HTTPError):
        status_code = getattr(error.response, "status_code", None)
        if status_code and status_code in retry_config.retryable_status_codes:
            return True
    return False


class RpcClient:
    def __init__(
        self,
        rpc_url: str,
        timeout_config: TimeoutConfig | None = None,
        retry_config: RetryConfig | None = None,
        on_retry: Callable[[int, Exception, float], None] | None = None,
        session: requests.Session | None = None,
    ):
        self.rpc_url = rpc_url.rstrip("/")
        self.timeout_config = timeout_config or DEFAULT_TIMEOUT_CONFIG
        self.retry_config = retry_config or DEFAULT_RETRY_CONFIG
        self.on_retry = on_retry
        self._session = session or requests.Session()
        self._request_ids = itertools.count(1)

    def execute_with_retry(
        self,
        operation: Callable[[], T],
        context: str = "",
    ) -> T:
        last_error: Exception | None = None

        for attempt in range(self.retry_config.max_retries + 1):
            try:
                return operation()
            except Exception as e:
                last_error = e

                if attempt < self.retry_config.max_retries and should_retry(
                    e, self.retry_config
                ):
                    delay = self.retry_config.calculate_delay(attempt)
                    logger.warning(
                        "RPC read failed (attempt %d/%d), retrying in %.1fs: %s",
                        attempt + 1,
                        self.retry_config.max_retries + 1,
                        delay,
                        str(e),
                    )

                    if self.on_retry:
                        self.on_retry(attempt + 1, e, delay)

                    time.sleep(delay)
                else:
                    break

        raise create_network_error(
            last_error or Exception("Unknown error"), self.rpc_url, context
        )

    def call(
        self,
        method: str,
        params: list[Any] | None = None,
        context: str = "",
    ) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._request_ids),
            "method": method,
            "params": params or [],
        }
        timeout = self.timeout_config.request_timeout

        def operation() -> Any:
            response = self._session.post(self.rpc_url, json=payload, timeout=timeout)
            response.raise_for_status()
            body = response.json()
            if "error" in body and body["error"]:
                error = body["error"]
                raise JsonRpcError(
                    error.get("code"), error.get("message", "Unknown RPC error"), error.get("data")
                )
            return body.get("result")

        return self.execute_with_retry(operation, context or method)

    def eth_call(self, to: str, data: str, block: str = "latest") -> str:
        return self.call(
            "eth_call", [{"to": to, "data": data}, block], context="eth_call"
        )

    def chain_id(self) -> int:
        return int(self.call("eth_chainId", context="Chain id fetch"), 16)
