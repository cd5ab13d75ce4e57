"""Run the solver with `python -m skyscraper`."""

import sys

from skyscraper import main

sys.exit(main())
