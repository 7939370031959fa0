"""Service layer: the metadata gateway facade and host protocols."""

from exifgate.services.interfaces import ResponseAnalyzerProtocol, ResponseInfoProtocol
from exifgate.services.metadata_gateway import MetadataGateway

__all__ = [
    "MetadataGateway",
    "ResponseAnalyzerProtocol",
    "ResponseInfoProtocol",
]
