"""
MCP server for the Spanish National Statistics Institute (INE) API.

This package exposes LLM-friendly tools backed by the public INE JSON API
(servicios.ine.es/wstempus). See DESIGN.md for full details.
"""

__version__ = "1.0.0"

__all__ = ["config", "__version__"]
