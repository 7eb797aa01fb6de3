from .datasets import generate_keys, read_keys, write_keys

__all__ = ["generate_keys", "read_keys", "write_keys"]
