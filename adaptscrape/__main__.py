"""Allow running AdaptScrape with ``python -m adaptscrape``."""

import sys

from adaptscrape.cli import main

sys.exit(main())
