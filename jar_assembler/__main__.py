"""Package entry point for ``python -m jar_assembler``."""

from jar_assembler.cli import main

if __name__ == "__main__":
    main()
