"""Request pipeline, realtime channel and notification registry."""

from .channel import ChannelState, EventChannel
from .errors import (
    ApiError,
    AuthenticationError,
    ChannelError,
    ClientError,
    NotFoundError,
    RateLimitError,
    ServerError,
    VoltnetError,
    error_for_status,
    is_retryable,
)
from .events import EVENT_KINDS, ROUTED_KINDS, NotificationRegistry
from .pipeline import PendingRequest, RequestPipeline, backoff_delay, build_headers

__all__ = [
    "ChannelState",
    "EventChannel",
    "ApiError",
    "AuthenticationError",
    "ChannelError",
    "ClientError",
    "NotFoundError",
    "RateLimitError",
    "ServerError",
    "VoltnetError",
    "error_for_status",
    "is_retryable",
    "EVENT_KINDS",
    "ROUTED_KINDS",
    "NotificationRegistry",
    "PendingRequest",
    "RequestPipeline",
    "backoff_delay",
    "build_headers",
]
