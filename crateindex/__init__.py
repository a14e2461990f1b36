"""Read rustdoc JSON and resolve the paths under which items are publicly importable."""

__version__ = "0.1.0"

__all__ = [
    "builder",
    "builtin_traits",
    "model",
    "names",
    "typedefs",
    "visibility",
]