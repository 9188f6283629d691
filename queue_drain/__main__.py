"""Allow `python -m queue_drain`."""

import sys

from queue_drain.cli import main

if __name__ == "__main__":
    sys.exit(main())
