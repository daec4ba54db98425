"""Allow ``python -m plato_runner``."""

from plato_runner.cli.main import main_entry

if __name__ == "__main__":
    main_entry()
