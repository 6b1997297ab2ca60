"""Index data management"""

from .database import init_database, get_connection
from .loader import index_rows, load_paths, load_file, get_index_info

__all__ = [
    "init_database",
    "get_connection",
    "index_rows",
    "load_paths",
    "load_file",
    "get_index_info",
]
