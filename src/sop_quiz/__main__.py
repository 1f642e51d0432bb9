"""Allow ``python -m sop_quiz FILE``."""

import sys

from sop_quiz.cli import main

sys.exit(main())
