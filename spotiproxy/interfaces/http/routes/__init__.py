"""Route blueprints exposed via Flask."""

from .auth import auth_bp
from .library import library_bp
from .health import health_bp

__all__ = [
    "auth_bp",
    "library_bp",
    "health_bp",
]
