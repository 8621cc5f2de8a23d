import sys

from websearch_gateway.cli import main

sys.exit(main())
