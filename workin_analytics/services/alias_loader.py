"""
University alias table loader.

Sources, in order of precedence:
  1. Redis cache (ALIAS_CACHE_KEY), when a client is given
  2. UNIVERSITY_ALIASES_SOURCE: an http(s) URL or a local YAML/JSON file
  3. the bundled data/universities.yaml

A table that cannot be fetched or parsed degrades to an empty table: every
university then resolves to its trimmed raw text.
"""
import json
import logging
import os

import requests
import yaml

from workin_analytics.analytics.aliases import AliasTable
from workin_analytics.config import (
    ALIAS_CACHE_KEY,
    ALIAS_CACHE_TTL,
    ALIAS_FETCH_TIMEOUT,
    UNIVERSITY_ALIASES_SOURCE,
)
from workin_analytics.errors import AliasLoadFailure

logger = logging.getLogger('services.alias_loader')

BUNDLED_ALIASES_PATH = os.path.join(
    os.path.dirname(os.path.dirname(__file__)), 'data', 'universities.yaml',
)


def _read_source(source: str) -> str:
    if source.startswith(('http://', 'https://')):
        response = requests.get(source, timeout=ALIAS_FETCH_TIMEOUT)
        response.raise_for_status()
        return response.text
    with open(source, 'r', encoding='utf-8') as f:
        return f.read()


def fetch_alias_table(source: str) -> AliasTable:
    """Fetch and parse one source. Raises AliasLoadFailure on any failure."""
    try:
        text = _read_source(source)
        # JSON is valid YAML, so one parser covers both file formats
        data = yaml.safe_load(text)
    except (requests.RequestException, OSError, yaml.YAMLError) as e:
        raise AliasLoadFailure(f"could not load aliases from {source}: {e}") from e
    table = AliasTable.from_mapping(data)
    version = data.get('version', '?') if isinstance(data, dict) else '?'
    logger.info(
        "Alias table loaded from %s (version=%s, %d exact, %d contains)",
        source, version, len(table.exact), len(table.contains),
        extra={'source': str(source)},
    )
    return table


def _cached_table(redis_client):
    try:
        cached = redis_client.get(ALIAS_CACHE_KEY)
        if cached:
            return AliasTable.from_mapping(json.loads(cached))
    except Exception as e:
        logger.warning("Ignoring unusable alias cache: %s", e)
    return None


def _store_cache(redis_client, table: AliasTable):
    try:
        redis_client.setex(ALIAS_CACHE_KEY, ALIAS_CACHE_TTL, json.dumps(table.to_mapping(), ensure_ascii=False))
    except Exception as e:
        logger.warning("Could not cache alias table: %s", e)


def load_alias_table(source=None, redis_client=None) -> AliasTable:
    """Load the alias table once per process run; never raises."""
    if redis_client is not None:
        cached = _cached_table(redis_client)
        if cached is not None:
            logger.debug("Alias table served from cache")
            return cached

    if source is None:
        source = UNIVERSITY_ALIASES_SOURCE
    try:
        table = fetch_alias_table(source or BUNDLED_ALIASES_PATH)
    except AliasLoadFailure as e:
        logger.warning("Alias table unavailable, resolving raw names: %s", e)
        return AliasTable.empty()

    if redis_client is not None and not table.is_empty:
        _store_cache(redis_client, table)
    return table
