"""Allow ``python -m archaeo``."""

from .cli import main

main()
