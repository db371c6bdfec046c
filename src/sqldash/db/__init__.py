"""Database / query execution backends.

Every widget query runs against one configured data source. Each execution
opens a fresh session, runs exactly one statement and closes the session;
nothing is pooled or cached.

Backends supported:
  - PostgreSQL : psycopg 3 async connection
  - MySQL      : aiomysql connection
  - SQLite     : aiosqlite on a local database file
"""
