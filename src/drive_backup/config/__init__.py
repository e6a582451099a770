"""Configuration management for the Drive backup application."""

from .settings import CredentialsConfig, ShareOptions, SyncConfig, WatchOptions, load_settings

__all__ = ["SyncConfig", "CredentialsConfig", "ShareOptions", "WatchOptions", "load_settings"]
