"""Allow `python -m tdaclust`."""

import sys

from tdaclust.cli import main

sys.exit(main())
