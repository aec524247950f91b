#!/usr/bin/env python3
"""
Run the MCP server in STDIO mode for desktop MCP clients
Uses ADO_PAT, or your local Azure credentials (az login)

Usage:
    python scripts/run_stdio.py ORGANIZATION [-d work-items -d wiki]
"""
from ado_mcp.server import main

if __name__ == "__main__":
    main()
