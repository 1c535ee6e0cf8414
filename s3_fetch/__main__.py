"""Module entry point: ``python -m s3_fetch``."""
from .cli import app


def main() -> None:
    app()


if __name__ == "__main__":
    main()
