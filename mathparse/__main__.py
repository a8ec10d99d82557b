import sys

from mathparse.cli import main

raise SystemExit(main(sys.argv[1:]))
