"""Allow ``python -m tiletrace``."""

import sys

from tiletrace.cli import main

sys.exit(main())
