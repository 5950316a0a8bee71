"""Core utilities shared by the engine (logging)."""

from plan_engine.core.logger import setup_logger

__all__ = ["setup_logger"]
