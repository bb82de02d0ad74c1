"""Entry point for ``python -m redissampler``."""

import sys

from redissampler.cli import main

if __name__ == "__main__":
    sys.exit(main())
