"""Supabase client for the territory store."""

import logging
from functools import lru_cache
from supabase import create_client, Client
from ..config import settings


@lru_cache()
def get_supabase_client() -> Client | None:
    """Get cached Supabase client instance.

    Returns:
        Supabase Client instance if configured, None otherwise.
        Note: This does not test the connection - actual queries may fail with network errors.
    """
    if not settings.supabase_configured:
        logging.info("Supabase credentials not configured; territories will be kept in memory")
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logging.error(f"Failed to create Supabase client: {e}")
        return None


# Expected schema:
#
# create table territories (
#   id text primary key, lat double precision, lng double precision,
#   radius double precision, practice text, practice_address text,
#   rep text, rep_email text, lock_date timestamptz, released_at timestamptz,
#   status text default 'ACTIVE', geometry_wkt text
# );
#
# create table territory_holds (
#   id text primary key, lat double precision, lng double precision,
#   radius double precision, practice text, practice_address text,
#   rep text, rep_email text, hold_date timestamptz, expires_at timestamptz,
#   status text default 'ACTIVE', geometry_wkt text
# );
