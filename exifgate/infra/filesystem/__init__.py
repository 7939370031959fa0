"""Private temporary workspace and platform permission policies."""

from exifgate.infra.filesystem.permissions import (
    PermissionPolicy,
    PosixPermissionPolicy,
    WindowsAclPermissionPolicy,
    select_permission_policy,
)
from exifgate.infra.filesystem.secure_workspace import SecureWorkspace

__all__ = [
    "PermissionPolicy",
    "PosixPermissionPolicy",
    "SecureWorkspace",
    "WindowsAclPermissionPolicy",
    "select_permission_policy",
]
