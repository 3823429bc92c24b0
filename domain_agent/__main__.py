import sys

from domain_agent.main import main

sys.exit(main())
