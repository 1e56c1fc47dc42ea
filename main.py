#!/usr/bin/env python3
"""Main entry point for the codemode proxy when run as a script."""

import asyncio
import sys

from mcp_codemode.core.manager import CodemodeProxy


async def main():
    """Main entry point."""
    config_path = sys.argv[1] if len(sys.argv) > 1 else None

    try:
        proxy = CodemodeProxy(config_path)
        await proxy.start()
    except KeyboardInterrupt:
        pass
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
