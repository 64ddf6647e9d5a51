"""Client for the logs.tf archive."""

from logs_tf.client import LogsTfClient, check_success
from logs_tf.errors import (
    LogsTfDecodeError,
    LogsTfError,
    LogsTfRejectedError,
    LogsTfTransportError,
)
from logs_tf.search_params import SearchParams

__all__ = [
    "LogsTfClient",
    "LogsTfDecodeError",
    "LogsTfError",
    "LogsTfRejectedError",
    "LogsTfTransportError",
    "SearchParams",
    "check_success",
]
