#!/usr/bin/env python3
"""
Run the MCP CLI from a source checkout without installing it.
"""

import sys
from pathlib import Path

# Add the src directory to Python path
src_dir = Path(__file__).parent / "src"
sys.path.insert(0, str(src_dir))


if __name__ == "__main__":
    from mcp_cli.main import main

    sys.exit(main())
