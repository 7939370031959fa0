"""Shared helpers: external tool lookup and JSON configuration."""
