"""Developer tools for the mini HTML parser."""

from .profiling import PerformanceProfiler, PerformanceReport, ProfilingSession

__all__ = [
    "PerformanceProfiler",
    "PerformanceReport",
    "ProfilingSession",
]
