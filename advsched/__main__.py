import sys

from advsched.numerical_integration import main

sys.exit(main())
