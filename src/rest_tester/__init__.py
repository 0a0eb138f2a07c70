"""rest-tester: an MCP bridge that calls REST endpoints on a configured base URL."""

__version__ = "0.1.0"
