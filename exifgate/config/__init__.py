"""Module: exifgate.config

Author: Michael Economou
Date: 2026-02-10

Configuration package for exifgate.

- app: Application info, logging
- exiftool: Worker arguments, protocol sentinels, shutdown timings, ignore defaults

All settings are re-exported from this module:
    from exifgate.config import EXIFTOOL_COMMAND, READY_SENTINELS
"""

from exifgate.config.app import *  # noqa: F401, F403
from exifgate.config.exiftool import *  # noqa: F401, F403
