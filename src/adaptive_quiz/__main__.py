"""Allow ``python -m adaptive_quiz``."""

import sys

from .cli import main

sys.exit(main())
