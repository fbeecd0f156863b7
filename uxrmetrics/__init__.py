"""UXR Metrics - tracking dashboard backend for UX research projects."""

__version__ = "1.0.0"
