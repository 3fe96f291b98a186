import sys

from supplyunit_sim.cli import main


sys.exit(main())
