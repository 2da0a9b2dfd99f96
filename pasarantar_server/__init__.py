"""PasarAntar storefront client and MCP server."""

__version__ = "0.1.0"
