import sys

from immuse.cli.wizard import main

sys.exit(main())
