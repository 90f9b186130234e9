import sys

from csv2sheet.cli import main

sys.exit(main())
