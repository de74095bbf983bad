# =============================================================================
# src/cli/__main__.py - Package Entry Point
# =============================================================================
#
# Enables `python -m src.cli`, which runs the search CLI:
#     python -m src.cli --lat 40.71 --lon -74.0 --category party
# =============================================================================

"""Allow ``python -m src.cli`` execution."""

from src.cli.search import main

main()
