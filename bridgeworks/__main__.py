"""Allow running as: python -m bridgeworks"""

import sys

from bridgeworks.main import run, serve

if __name__ == "__main__":
    if "--serve" in sys.argv:
        serve()
    else:
        run()
