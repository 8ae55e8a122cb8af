"""Allow ``python -m examcell``."""

from examcell.cli import main

main()
