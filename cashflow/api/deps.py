"""Shared API dependencies."""

from cashflow.config import Settings, settings


def get_settings() -> Settings:
    return settings


__all__ = ["get_settings"]
