from depth_stream.core.types._exception_types import ErrorCategory, ErrorCode, ErrorDomain
from depth_stream.core.types._payload_type import (
    BookSide,
    ConnectionState,
    SinkMode,
    SocketMessage,
    SubscribeRequest,
)

__all__ = [
    "BookSide",
    "ConnectionState",
    "ErrorCategory",
    "ErrorCode",
    "ErrorDomain",
    "SinkMode",
    "SocketMessage",
    "SubscribeRequest",
]
