"""Configuration for the deadlock detector."""

from .detection_config import DetectionConfig, DEFAULT_SNAPSHOT_QUERY

__all__ = ['DetectionConfig', 'DEFAULT_SNAPSHOT_QUERY']
