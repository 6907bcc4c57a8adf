"""Module entrypoint for ``python -m vicline``.

All argument parsing and runtime setup happen in ``vicline.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
