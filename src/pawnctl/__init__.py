"""Package manager and build tool for open.mp/SA-MP development."""

__version__ = "0.4.0"
