"""Module: exifgate.config.exiftool

Author: Michael Economou
Date: 2026-02-10

ExifTool worker settings: launch arguments, stay-open protocol tokens,
shutdown timings and default ignore sets.
"""

# =====================================
# WORKER LAUNCH
# =====================================

EXIFTOOL_COMMAND = "exiftool"
EXIFTOOL_STAY_OPEN_ARGS = ("-stay_open", "True", "-@", "-")

# =====================================
# STAY-OPEN PROTOCOL
# =====================================

EXECUTE_SENTINEL = "-execute"
READY_SENTINEL = "{ready}"
READY_ERROR_SENTINEL = "{ready-}"
READY_SENTINELS = frozenset({READY_SENTINEL, READY_ERROR_SENTINEL})

# -m: ignore minor errors, -S: very short output, -E: escape for HTML, -sort: sort tags
EXIFTOOL_PLAIN_OPTIONS = ("-m", "-S", "-sort")
EXIFTOOL_HTML_OPTIONS = ("-m", "-S", "-E", "-sort")

EXIFTOOL_EXIT_COMMAND = ("-stay_open", "False")

# Separator between tag name and value in -S output
FIELD_SEPARATOR = ":"

# =====================================
# WORKSPACE
# =====================================

WORKSPACE_PREFIX = "exifgate"
STAGED_FILE_PREFIX = "file"
STAGED_FILE_SUFFIX = ""
EXTRACTED_BINARY_PREFIX = "exiftool"
EXTRACTED_BINARY_SUFFIX = ".exe"
RESOURCE_COPY_CHUNK_SIZE = 32768

# =====================================
# SHUTDOWN
# =====================================

EXIFTOOL_SHUTDOWN_GRACE_PERIOD = 5.0
EXIFTOOL_SHUTDOWN_WAIT_TIMEOUT = 30.0
EXIFTOOL_KILL_ON_SHUTDOWN_TIMEOUT = False

# =====================================
# IGNORE DEFAULTS
# =====================================

DEFAULT_TYPES_TO_IGNORE: tuple[str, ...] = (
    "text/html",
    "text/css",
    "text/javascript",
    "application/javascript",
    "application/json",
)

# Tags describing the staged temp file rather than the payload
DEFAULT_LINES_TO_IGNORE: tuple[str, ...] = (
    "ExifToolVersion",
    "FileName",
    "Directory",
    "FilePermissions",
    "FileModifyDate",
    "FileAccessDate",
    "FileInodeChangeDate",
    "FileCreateDate",
)
