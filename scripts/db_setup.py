#!/usr/bin/env python
"""
Provision a local PostgreSQL database for Business Nexus.

Creates the application role and database when they are missing, grants the
role access to the public schema, then creates the users, requests and
messages tables from the ORM metadata.

Reads from the project .env:
  DB_SUPERUSER_PASSWORD, DB_USER, DB_PASSWORD       (required)
  DB_HOST, DB_PORT, DB_SUPERUSER, DB_NAME           (optional)

Usage:
  python scripts/db_setup.py
  python scripts/db_setup.py --reset    # drop the database first
"""
import argparse
import os
import sys
from pathlib import Path

import psycopg2
from dotenv import load_dotenv
from psycopg2 import sql
from psycopg2.extensions import ISOLATION_LEVEL_AUTOCOMMIT
from sqlalchemy import create_engine

PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(PROJECT_ROOT / ".env")


class SetupConfig:
    def __init__(self):
        self.host = os.getenv("DB_HOST", "127.0.0.1")
        self.port = os.getenv("DB_PORT", "5432")
        self.superuser = os.getenv("DB_SUPERUSER", "postgres")
        self.superuser_password = os.getenv("DB_SUPERUSER_PASSWORD")
        self.user = os.getenv("DB_USER")
        self.password = os.getenv("DB_PASSWORD")
        self.name = os.getenv("DB_NAME", "BusinessNexus")

    def missing(self):
        required = {
            "DB_SUPERUSER_PASSWORD": self.superuser_password,
            "DB_USER": self.user,
            "DB_PASSWORD": self.password,
        }
        return [key for key, value in required.items() if not value]

    def admin_connection(self, dbname="postgres"):
        conn = psycopg2.connect(
            dbname=dbname,
            user=self.superuser,
            password=self.superuser_password,
            host=self.host,
            port=self.port,
        )
        conn.set_isolation_level(ISOLATION_LEVEL_AUTOCOMMIT)
        return conn


def ensure_role(cur, cfg):
    cur.execute("SELECT 1 FROM pg_roles WHERE rolname = %s", (cfg.user,))
    if cur.fetchone():
        print(f"Role '{cfg.user}' already exists")
        return
    cur.execute(
        sql.SQL("CREATE ROLE {} WITH LOGIN PASSWORD %s").format(sql.Identifier(cfg.user)),
        (cfg.password,),
    )
    print(f"Role '{cfg.user}' created")


def drop_database(cur, cfg):
    cur.execute(
        "SELECT pg_terminate_backend(pid) FROM pg_stat_activity WHERE datname = %s AND pid <> pg_backend_pid()",
        (cfg.name,),
    )
    cur.execute(sql.SQL("DROP DATABASE IF EXISTS {}").format(sql.Identifier(cfg.name)))
    print(f"Database '{cfg.name}' dropped")


def ensure_database(cur, cfg):
    cur.execute("SELECT 1 FROM pg_database WHERE datname = %s", (cfg.name,))
    if cur.fetchone():
        print(f"Database '{cfg.name}' already exists")
        return
    cur.execute(
        sql.SQL("CREATE DATABASE {} OWNER {}").format(sql.Identifier(cfg.name), sql.Identifier(cfg.user))
    )
    print(f"Database '{cfg.name}' created")


def grant_schema_access(cfg):
    """Give the application role full rights on the public schema of its database."""
    role = sql.Identifier(cfg.user)
    statements = [
        sql.SQL("GRANT ALL ON SCHEMA public TO {}").format(role),
        sql.SQL("GRANT ALL PRIVILEGES ON ALL TABLES IN SCHEMA public TO {}").format(role),
        sql.SQL("ALTER DEFAULT PRIVILEGES IN SCHEMA public GRANT ALL PRIVILEGES ON TABLES TO {}").format(role),
    ]
    conn = cfg.admin_connection(cfg.name)
    try:
        with conn.cursor() as cur:
            for statement in statements:
                cur.execute(statement)
    finally:
        conn.close()
    print(f"Schema privileges granted to '{cfg.user}'")


def create_tables(cfg):
    sys.path.insert(0, str(PROJECT_ROOT / "backend"))
    from nexus.db.models import Base

    engine = create_engine(
        f"postgresql://{cfg.superuser}:{cfg.superuser_password}@{cfg.host}:{cfg.port}/{cfg.name}"
    )
    try:
        Base.metadata.create_all(bind=engine)
    finally:
        engine.dispose()
    print(f"Tables ready: {', '.join(sorted(Base.metadata.tables))}")


def main():
    parser = argparse.ArgumentParser(description="Provision the Business Nexus database")
    parser.add_argument("--reset", action="store_true", help="drop the database before creating it")
    args = parser.parse_args()

    cfg = SetupConfig()
    missing = cfg.missing()
    if missing:
        print(f"ERROR: missing {', '.join(missing)} in .env")
        return 1

    print(f"Connecting to PostgreSQL at {cfg.host}:{cfg.port} as {cfg.superuser}")
    try:
        conn = cfg.admin_connection()
        try:
            with conn.cursor() as cur:
                ensure_role(cur, cfg)
                if args.reset:
                    drop_database(cur, cfg)
                ensure_database(cur, cfg)
        finally:
            conn.close()
        grant_schema_access(cfg)
    except psycopg2.Error as e:
        print(f"Database setup failed: {e}")
        return 1

    create_tables(cfg)
    print("Done")
    return 0


if __name__ == "__main__":
    sys.exit(main())
