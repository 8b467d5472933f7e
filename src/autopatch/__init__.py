"""AutoPatch - replay Git branch and merge history between repositories."""

__version__ = "0.1.0"
