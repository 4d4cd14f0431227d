"""Allow ``python -m confgen``."""

from confgen.cli import main

main()
