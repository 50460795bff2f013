"""HTTP and MCP transports over the dispatcher."""
