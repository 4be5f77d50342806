"""PostgreSQL-backed model layer (psycopg2)."""
