import sys

from mongo_fixtures.scripts.load_fixtures import main

sys.exit(main())
