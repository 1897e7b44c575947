"""Allow ``python -m goldenset``."""

import sys

from goldenset.cli import main

sys.exit(main())
