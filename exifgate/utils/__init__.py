"""Utility package for exifgate (logging, paths, shared helpers)."""
