"""exifgate: metadata extraction from response bodies through a persistent exiftool.

Author: Michael Economou
Date: 2026-02-10
"""

from exifgate.config import APP_VERSION as __version__
from exifgate.domain import IgnoreRules, ResponseInfo, analyze_response
from exifgate.errors import (
    ExchangeIOError,
    ExifGateError,
    GatewayInitError,
    WorkerLaunchError,
    WorkspaceInitError,
)
from exifgate.infra.external.exiftool_protocol import ExtractionMode
from exifgate.services.metadata_gateway import MetadataGateway

__all__ = [
    "ExchangeIOError",
    "ExifGateError",
    "ExtractionMode",
    "GatewayInitError",
    "IgnoreRules",
    "MetadataGateway",
    "ResponseInfo",
    "WorkerLaunchError",
    "WorkspaceInitError",
    "__version__",
    "analyze_response",
]
