"""Allow ``python -m interview_coder.cli`` execution."""

import sys

from interview_coder.cli.solve import main

sys.exit(main())
