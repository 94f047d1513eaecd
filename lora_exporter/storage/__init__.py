from .dump_store import DumpStore

__all__ = ["DumpStore"]
