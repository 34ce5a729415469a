"""Allow ``python -m safedecompress``."""

from safedecompress.cli import app

if __name__ == "__main__":
    app()
