import sys

from storage_audit.main import main

sys.exit(main())
