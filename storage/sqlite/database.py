import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Union

DB_PATH = Path("storage/sqlite/deepcut.db")


def dict_factory(cursor, row):
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


@contextmanager
def get_connection(db_path: Optional[Union[str, Path]] = None):
    path = Path(db_path) if db_path is not None else DB_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    connection = sqlite3.connect(path)
    try:
        yield connection
    finally:
        connection.close()
