"""Allow ``python -m mkacct``."""

from mkacct.cli import main

main()
