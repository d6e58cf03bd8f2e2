"""renderq - serialized render queue for video compositions."""

__version__ = "0.1.0"
