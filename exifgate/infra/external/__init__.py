"""External worker: exiftool process supervision and stay-open protocol."""

from exifgate.infra.external.exiftool_process import ExifToolProcess
from exifgate.infra.external.exiftool_protocol import ExifToolProtocol, ExtractionMode

__all__ = [
    "ExifToolProcess",
    "ExifToolProtocol",
    "ExtractionMode",
]
