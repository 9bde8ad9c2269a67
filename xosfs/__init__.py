"""Create, load and inspect XFS disk images for a small teaching operating system."""

__version__ = "0.1.0"