"""
DynamoDB Query Executor

Issues one DynamoDB ``Query`` per attempt using boto3. The blocking client
call runs in a dedicated thread pool sized to the connection pool, so the
asyncio pipeline never blocks on network I/O.

SDK-level retries are disabled; retrying is owned by the benchmark's
retry/timeout wrapper so every attempt is visible and counted.
"""

import asyncio
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionError as BotoConnectionError,
    HTTPClientError,
    NoCredentialsError,
    ParamValidationError,
    ReadTimeoutError,
)

from rangebench.config import settings
from rangebench.core.errors import QueryExecutionError
from rangebench.core.executor.helpers import truncate_str_for_log
from rangebench.core.executor.types import FailureKind
from rangebench.models import Consistency, QuerySpec

logger = logging.getLogger(__name__)

# ClientError codes -> failure kind. Unlisted codes map to OTHER.
CLIENT_ERROR_KINDS: Dict[str, FailureKind] = {
    "ProvisionedThroughputExceededException": FailureKind.THROTTLED,
    "ThrottlingException": FailureKind.THROTTLED,
    "RequestLimitExceeded": FailureKind.THROTTLED,
    "InternalServerError": FailureKind.TRANSIENT_NETWORK,
    "ServiceUnavailable": FailureKind.TRANSIENT_NETWORK,
    "RequestTimeout": FailureKind.TIMEOUT,
    "ValidationException": FailureKind.INVALID_REQUEST,
    "ResourceNotFoundException": FailureKind.INVALID_REQUEST,
    "AccessDeniedException": FailureKind.UNAUTHORIZED,
    "UnrecognizedClientException": FailureKind.UNAUTHORIZED,
    "ExpiredTokenException": FailureKind.UNAUTHORIZED,
    "InvalidSignatureException": FailureKind.UNAUTHORIZED,
    "MissingAuthenticationTokenException": FailureKind.UNAUTHORIZED,
}


def classify_botocore_error(exc: Exception) -> FailureKind:
    """Map a boto3/botocore exception to a FailureKind."""
    if isinstance(exc, ClientError):
        code = str(exc.response.get("Error", {}).get("Code", ""))
        return CLIENT_ERROR_KINDS.get(code, FailureKind.OTHER)
    if isinstance(exc, NoCredentialsError):
        return FailureKind.UNAUTHORIZED
    if isinstance(exc, ParamValidationError):
        return FailureKind.INVALID_REQUEST
    # ReadTimeoutError is an HTTPClientError; check it first.
    if isinstance(exc, ReadTimeoutError):
        return FailureKind.TIMEOUT
    if isinstance(exc, (BotoConnectionError, HTTPClientError)):
        return FailureKind.TRANSIENT_NETWORK
    return FailureKind.OTHER


def build_query_params(spec: QuerySpec, consistency: Consistency) -> Dict[str, Any]:
    """
    Build the low-level client ``Query`` arguments for a range query.

    Attribute names are always aliased so reserved words work as key names.
    """
    names = {"#pk": spec.partition_key}
    values: Dict[str, Any] = {":pk": {"S": spec.partition_value}}
    condition = "#pk = :pk"

    if spec.is_range_query:
        names["#sk"] = str(spec.sort_key)
        if spec.sort_start is not None and spec.sort_end is not None:
            condition += " AND #sk BETWEEN :start AND :end"
            values[":start"] = {"S": spec.sort_start}
            values[":end"] = {"S": spec.sort_end}
        elif spec.sort_start is not None:
            condition += " AND #sk >= :start"
            values[":start"] = {"S": spec.sort_start}
        else:
            condition += " AND #sk <= :end"
            values[":end"] = {"S": spec.sort_end}

    return {
        "TableName": spec.table_name,
        "KeyConditionExpression": condition,
        "ExpressionAttributeNames": names,
        "ExpressionAttributeValues": values,
        "ConsistentRead": consistency == Consistency.STRONG,
    }


class DynamoDBQueryExecutor:
    """
    Query executor backed by the boto3 DynamoDB client.
    """

    name = "dynamodb"

    def __init__(
        self,
        *,
        region: Optional[str] = None,
        profile: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        pool_size: int = 10,
        max_in_flight: Optional[int] = None,
        connect_timeout: Optional[float] = None,
        read_timeout: Optional[float] = None,
    ):
        """
        Initialize DynamoDB executor. No network or credential work happens
        until ``setup``.

        Args:
            region: AWS region (defaults to settings.AWS_REGION)
            profile: Named AWS profile (optional)
            endpoint_url: Endpoint override, e.g. DynamoDB Local
            pool_size: HTTP connection pool size and worker thread count
            max_in_flight: Most attempts the caller keeps in flight; the pool
                is grown to at least this so attempts never queue for a thread
            connect_timeout: Socket connect timeout in seconds
            read_timeout: Socket read timeout in seconds
        """
        self.region = region or settings.AWS_REGION
        self.profile = profile
        self.endpoint_url = endpoint_url
        self.pool_size = max(1, int(pool_size), int(max_in_flight or 0))
        self.connect_timeout = (
            float(connect_timeout)
            if connect_timeout is not None
            else settings.DYNAMODB_CONNECT_TIMEOUT_SECONDS
        )
        self.read_timeout = (
            float(read_timeout)
            if read_timeout is not None
            else settings.DYNAMODB_READ_TIMEOUT_SECONDS
        )

        self._client: Any = None
        self._thread_pool: Optional[ThreadPoolExecutor] = None

    def _run_in_executor(self, func, *args):
        loop = asyncio.get_running_loop()
        return loop.run_in_executor(self._thread_pool, func, *args)

    def _create_client(self) -> Any:
        if self.profile:
            session = boto3.Session(profile_name=self.profile, region_name=self.region)
        else:
            session = boto3.Session(region_name=self.region)
        cfg = Config(
            retries={"max_attempts": 0, "mode": "standard"},
            max_pool_connections=self.pool_size,
            connect_timeout=self.connect_timeout,
            read_timeout=self.read_timeout,
        )
        return session.client("dynamodb", endpoint_url=self.endpoint_url, config=cfg)

    async def setup(self) -> None:
        """Create the worker threads and the boto3 client."""
        if self._client is not None:
            return
        self._thread_pool = ThreadPoolExecutor(
            max_workers=self.pool_size, thread_name_prefix="rangebench-dynamodb"
        )
        self._client = await self._run_in_executor(self._create_client)
        logger.info(
            f"Initialized DynamoDB client: region={self.region}, "
            f"pool_size={self.pool_size}, endpoint={self.endpoint_url or 'default'}"
        )

    def _query(self, params: Dict[str, Any], deadline: Optional[float]) -> float:
        # The caller stops waiting at the deadline; an attempt that only got a
        # thread after that point must not reach the table.
        if deadline is not None and time.monotonic() >= deadline:
            raise QueryExecutionError(FailureKind.TIMEOUT, "deadline passed before send")

        start = time.perf_counter()
        resp = self._client.query(**params)
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        logger.debug("Query returned %s items", resp.get("Count"))
        return elapsed_ms

    async def execute(
        self,
        spec: QuerySpec,
        consistency: Consistency,
        deadline: Optional[float],
    ) -> float:
        if self._client is None:
            raise RuntimeError("DynamoDBQueryExecutor.setup() has not been called")
        if deadline is not None and time.monotonic() >= deadline:
            raise QueryExecutionError(FailureKind.TIMEOUT, "deadline passed before send")

        params = build_query_params(spec, consistency)
        try:
            return await self._run_in_executor(self._query, params, deadline)
        except (ClientError, BotoCoreError) as e:
            kind = classify_botocore_error(e)
            raise QueryExecutionError(
                kind, truncate_str_for_log(f"{type(e).__name__}: {e}", max_chars=300)
            ) from e

    async def close(self) -> None:
        client, self._client = self._client, None
        pool, self._thread_pool = self._thread_pool, None
        if client is not None:
            client.close()
        if pool is not None:
            # In-flight abandoned attempts are left to finish on their own.
            pool.shutdown(wait=False, cancel_futures=True)
