"""AWS Tag Sweeper - tag-driven discovery and dependency-ordered deletion of AWS resources."""

__version__ = "0.1.0"
