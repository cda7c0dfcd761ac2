"""MCP tool server exposing the work dashboard and the evidence ledger."""
