"""Observability for standby: loguru setup and event logging."""

from standby.observability.logging import LogConfig, setup_logging, teardown_logging

__all__ = ["LogConfig", "setup_logging", "teardown_logging"]
