"""Module entrypoint for ``python -m ctxtree``.

All argument parsing and command dispatch happen in ``ctxtree.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
