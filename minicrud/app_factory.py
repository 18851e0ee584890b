"""Entry point for uvicorn/gunicorn: ``uvicorn minicrud.app_factory:app``."""
from minicrud.app import create_app

app = create_app()

__all__ = ["app", "create_app"]
