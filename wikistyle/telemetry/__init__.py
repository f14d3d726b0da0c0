"""Telemetry and observability helpers.

This package emits structured run events for normalization stages and page outcomes.
"""

from .logger import RunLogger

__all__ = ["RunLogger"]
