"""Module entrypoint for ``python -m frecd``.

This keeps module-mode execution behavior identical to the CLI script.
"""

from .cli import main


if __name__ == "__main__":
    main()
