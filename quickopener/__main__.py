"""Module entrypoint for ``python -m quickopener``.

All argument parsing and resolution happen in ``quickopener.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
