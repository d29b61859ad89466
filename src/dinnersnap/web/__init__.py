"""DinnerSnap HTTP entry point."""

from dinnersnap.web.app import app, create_app

__all__ = ["app", "create_app"]
