import sys

from commute_roi.cli import main

if __name__ == "__main__":
    sys.exit(main())
