from depth_stream.common.exceptions.base import (
    DepthStreamException,
    InfoRequestError,
    SnapshotTransformError,
    SymbolUniverseError,
)

__all__ = [
    "DepthStreamException",
    "InfoRequestError",
    "SnapshotTransformError",
    "SymbolUniverseError",
]
