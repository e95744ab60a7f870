#Resolve a single route from the command line using the providers configured in .env
#Usage: python scripts/resolve_route.py 23.1828 75.7689 23.1769 75.7889 [--json]

import sys

from routing.cli import main

if __name__ == "__main__":
    sys.exit(main())
