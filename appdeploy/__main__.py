"""
Entry point for the appdeploy CLI application.
"""

import sys

from loguru import logger

from appdeploy.cli.main import app


def main():
    """Run the CLI; deployment errors are handled per command in appdeploy.cli.main."""
    try:
        app()
    except KeyboardInterrupt:
        print("\n\nCancelled. A deployment already started may still finish on the device.")
        sys.exit(0)
    except Exception as e:
        logger.opt(exception=e).debug("Unhandled error")
        print(f"\n❌ Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
