"""Command-line interface."""
from maxwelldg.main import main

if __name__ == "__main__":
    main()
