"""Sample telemetry generators."""

from .sample_generator import SampleGenerator

__all__ = ["SampleGenerator"]
