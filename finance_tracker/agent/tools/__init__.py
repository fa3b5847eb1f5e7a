"""
Tools available to the financial assistant.
"""

from .finance_tools import create_finance_tools
from .registry import NoArguments, ToolRegistry, ToolSpec, parse_arguments

__all__ = [
    "NoArguments",
    "ToolRegistry",
    "ToolSpec",
    "create_finance_tools",
    "parse_arguments",
]
