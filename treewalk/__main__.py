"""Module entrypoint for ``python -m treewalk``.

All argument parsing happens in ``treewalk.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
