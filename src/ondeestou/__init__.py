"""Position tracking, address change detection and spoken announcements."""

__version__ = "0.7.0"
