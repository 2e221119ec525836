"""Allow ``python -m create_rn_app``."""

import sys

from create_rn_app.cli import main

sys.exit(main())
