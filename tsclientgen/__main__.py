"""Entry point: python -m tsclientgen

Same commands as the tsclientgen console script.
"""

from __future__ import annotations

from .cli import main

if __name__ == "__main__":
    main(prog_name="tsclientgen")
