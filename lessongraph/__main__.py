"""Module entry-point for ``python -m lessongraph``."""

from lessongraph.validate import main

if __name__ == "__main__":
    main()
