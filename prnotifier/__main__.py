import sys

from prnotifier.main import main

sys.exit(main())
