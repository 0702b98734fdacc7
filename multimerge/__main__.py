import sys

from multimerge.cli import main

sys.exit(main())
