# =============================================================================
# tools/__init__.py
# =============================================================================
# The MCP surface of the adapter (FastMCP).
#
# ARCHITECTURAL ROLE:
#   tools/ translates between MCP and core/.  It:
#     1. Receives the raw tool arguments
#     2. Passes them to core/ for resolution and validation
#     3. Hands the resulting command to the configured dispatcher
#     4. Formats a short text reply for the caller
#
#   It holds no connections of its own; everything it talks to arrives in
#   the AdapterContext given to create_server().
# =============================================================================
