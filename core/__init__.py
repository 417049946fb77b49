# =============================================================================
# core/__init__.py
# =============================================================================
# Business logic of the deploy adapter: data models, the template catalog
# contract, and the deploy request resolver.
#
# Nothing in this package imports FastMCP, NATS, Mongo or HTTP clients.
# The network-facing pieces live in backends/; the MCP surface in tools/.
# =============================================================================
