"""Package entry point for ``python -m deltamark``.

WHY: Users run the converter as ``python -m deltamark parse notes.md``
without installing the console script.

HOW: Delegates to the CLI's main() function.
"""

from deltamark.cli import main

if __name__ == "__main__":
    main()
