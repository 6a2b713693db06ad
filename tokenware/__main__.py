import sys

from tokenware.cli import main

sys.exit(main())
