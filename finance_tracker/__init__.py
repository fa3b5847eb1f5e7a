"""Personal finance tracker backend with a tool-calling financial assistant."""

__version__ = "0.1.0"
