import sys

from mcp_cli.main import main

sys.exit(main())
