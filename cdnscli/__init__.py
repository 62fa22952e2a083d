"""cdnscli - DNS zone and record management TUI."""

__version__ = "0.4.0"
