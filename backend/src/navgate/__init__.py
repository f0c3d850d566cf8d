"""navgate: plugin capability enforcement and verified navigation composition."""

__version__ = "0.1.0"
