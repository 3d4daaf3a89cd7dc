import sys

from broth.cli import main

sys.exit(main())
