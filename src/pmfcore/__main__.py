import sys

from pmfcore.cli import main

sys.exit(main())
