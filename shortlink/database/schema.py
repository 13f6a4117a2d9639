"""Table definition and statements for URL mappings."""

TABLE_NAME = "urls"

# Valid in both SQLite and PostgreSQL.
CREATE_TABLE_SQL = f"""
CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
    id  TEXT PRIMARY KEY,
    url TEXT NOT NULL
);
"""

# A skipped row means the id was already taken.
SQLITE_INSERT_SQL = f"INSERT INTO {TABLE_NAME} (id, url) VALUES (?, ?) ON CONFLICT(id) DO NOTHING"
POSTGRES_INSERT_SQL = f"INSERT INTO {TABLE_NAME} (id, url) VALUES ($1, $2) ON CONFLICT (id) DO NOTHING"

SQLITE_SELECT_SQL = f"SELECT url FROM {TABLE_NAME} WHERE id = ?"
POSTGRES_SELECT_SQL = f"SELECT url FROM {TABLE_NAME} WHERE id = $1"

COUNT_SQL = f"SELECT COUNT(*) FROM {TABLE_NAME}"
TABLE_PROBE_SQL = f"SELECT 1 FROM {TABLE_NAME} LIMIT 1"
