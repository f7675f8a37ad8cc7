from .models import FileInfo, Node, validate_tree

__all__ = [
    "FileInfo",
    "Node",
    "validate_tree",
]
