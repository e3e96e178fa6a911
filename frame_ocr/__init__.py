"""Text recognition for camera frames: enhance, recognize, pick the best read."""

__version__ = "1.0.0"
