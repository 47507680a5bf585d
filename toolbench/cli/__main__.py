"""Allow ``python -m toolbench.cli`` execution."""

import sys

from toolbench.cli.admin import main

sys.exit(main())
