"""SQLite storage backend."""