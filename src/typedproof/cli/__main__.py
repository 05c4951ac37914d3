import sys

from .main import cli_main

sys.exit(cli_main())
