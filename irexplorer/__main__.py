"""Module entrypoint for ``python -m irexplorer``.

Behaves exactly like the ``irexplorer`` console script.
"""

from .cli import main


if __name__ == "__main__":
    main()
