"""Utility helpers."""

from longform_engine.utils.async_utils import run_async, wait

__all__ = ["run_async", "wait"]
