"""Run the seqtok command-line interface."""

import sys

from .cli import main

sys.exit(main())
