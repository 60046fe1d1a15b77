"""Allow ``python -m threatscope``."""

from .cli import main

main()
