from .atomic import atomic_write_json, file_lock, read_json

__all__ = ["atomic_write_json", "file_lock", "read_json"]
