"""Empacy: multi-agent coordination plane served over MCP."""

__version__ = "1.1.0"
