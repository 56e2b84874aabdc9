"""Cache layer in front of translation reads.

Keys follow ``{prefix}.{type}.{id}.{locale}.{field|all}``. Bulk reads fold
a hash of the requested items and fields into the key, plus the write
generation of every entity type involved, so any write to one of those
types makes older bulk entries unreachable.

Negative lookups are cached too: a producer returning ``None`` is stored
as an absent marker and returned as ``None`` on the next hit.

Backend failures never fail a read. They are logged and treated as a miss.
"""

import hashlib
import json
import logging
import threading
import time

import redis

logger = logging.getLogger(__name__)

ABSENT_MARKER = {'__translation_absent__': True}

# Sentinel for "key not in cache" (distinct from a cached None)
_MISS = object()


def _encode(value):
    return ABSENT_MARKER if value is None else value


def _decode(value):
    return None if value == ABSENT_MARKER else value


class MemoryCacheBackend:
    """Process-local cache with per-entry expiry.

    Values are kept JSON-encoded, like on Redis, so callers never share
    mutable objects with the cache. Expired entries are swept every
    ``sweep_every`` writes or ``sweep_interval`` seconds, whichever comes
    first. Past ``max_entries`` the oldest writes are evicted. Generation
    counters live apart from the entries and are never evicted.
    """

    def __init__(self, max_entries=10000, sweep_every=1000, sweep_interval=60):
        self.max_entries = max_entries
        self.sweep_every = sweep_every
        self.sweep_interval = sweep_interval

        self._data = {}
        self._counters = {}
        self._lock = threading.Lock()
        self._writes = 0
        self._next_sweep_at = time.monotonic() + sweep_interval

    def get(self, key):
        with self._lock:
            if key in self._counters:
                return self._counters[key]
            entry = self._data.get(key)
            if entry is None:
                return _MISS
            value, expires_at = entry
            if expires_at is not None and expires_at <= time.monotonic():
                del self._data[key]
                return _MISS
            return json.loads(value)

    def set(self, key, value, ttl):
        now = time.monotonic()
        expires_at = now + ttl if ttl else None
        with self._lock:
            # Re-inserting moves the key to the young end for eviction
            self._data.pop(key, None)
            self._data[key] = (json.dumps(value), expires_at)
            self._writes += 1
            if (
                self._writes >= self.sweep_every
                or now >= self._next_sweep_at
                or len(self._data) > self.max_entries
            ):
                self._sweep(now)

    def _sweep(self, now):
        self._writes = 0
        self._next_sweep_at = now + self.sweep_interval

        expired = [
            key for key, (_, expires_at) in self._data.items()
            if expires_at is not None and expires_at <= now
        ]
        for key in expired:
            del self._data[key]

        overflow = len(self._data) - self.max_entries
        if overflow > 0:
            for key in list(self._data)[:overflow]:
                del self._data[key]
            logger.debug(f"Translation memory cache evicted {overflow} entries")

    def delete(self, key):
        with self._lock:
            self._data.pop(key, None)
            self._counters.pop(key, None)

    def incr(self, key):
        with self._lock:
            value = self._counters.get(key, 0) + 1
            self._counters[key] = value
            return value

    def clear(self, prefix):
        with self._lock:
            for key in [k for k in self._data if k.startswith(prefix)]:
                del self._data[key]
            for key in [k for k in self._counters if k.startswith(prefix)]:
                del self._counters[key]

    def __len__(self):
        return len(self._data)


class RedisCacheBackend:
    """Shared cache on Redis. Values are stored as JSON."""

    def __init__(self, client):
        self._client = client

    def get(self, key):
        raw = self._client.get(key)
        if raw is None:
            return _MISS
        return json.loads(raw)

    def set(self, key, value, ttl):
        payload = json.dumps(value)
        if ttl:
            self._client.setex(key, ttl, payload)
        else:
            self._client.set(key, payload)

    def delete(self, key):
        self._client.delete(key)

    def incr(self, key):
        return int(self._client.incr(key))

    def clear(self, prefix):
        for key in self._client.scan_iter(match=f'{prefix}*'):
            self._client.delete(key)


class TranslationCache:
    """Key/value cache used by the translation store."""

    def __init__(self, backend=None, prefix='translations', ttl=3600, enabled=True):
        self.backend = backend if backend is not None else MemoryCacheBackend()
        self.prefix = prefix
        self.ttl = ttl
        self.enabled = enabled

        self._locks = {}
        self._locks_guard = threading.Lock()

    @classmethod
    def from_config(cls, config, redis_client=None):
        backend = None
        if config.cache_backend == 'redis':
            if redis_client is None:
                from translatable.services.redis_client import get_redis
                redis_client = get_redis()
            if redis_client is not None:
                backend = RedisCacheBackend(redis_client)
            else:
                logger.warning("Redis cache backend requested but unavailable, using memory cache")
        return cls(
            backend=backend,
            prefix=config.cache_prefix,
            ttl=config.cache_ttl,
            enabled=config.cache_enabled,
        )

    # -- keys ---------------------------------------------------------------

    def entity_key(self, translatable_type, translatable_id, locale, field='all'):
        return f'{self.prefix}.{translatable_type}.{translatable_id}.{locale}.{field}'

    def generation_key(self, translatable_type):
        return f'{self.prefix}.{translatable_type}.generation'

    def bulk_key(self, items, locale, fields=None):
        items_payload = json.dumps(
            [[item['type'], item['id']] for item in items], separators=(',', ':')
        )
        fields_payload = json.dumps(list(fields or []), separators=(',', ':'))
        items_hash = hashlib.md5(items_payload.encode('utf-8')).hexdigest()
        fields_hash = hashlib.md5(fields_payload.encode('utf-8')).hexdigest()

        types = sorted({item['type'] for item in items})
        generation = '-'.join(str(self.generation(t)) for t in types) or '0'
        return f'{self.prefix}.bulk.{items_hash}.{locale}.{fields_hash}.{generation}'

    # -- operations ---------------------------------------------------------

    def _lock_for(self, key):
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def _release_lock(self, key):
        with self._locks_guard:
            self._locks.pop(key, None)

    def get(self, key, default=None):
        """Return the cached value, ``default`` on a miss."""
        if not self.enabled:
            return default
        value = self._lookup(key)
        return default if value is _MISS else value

    def put(self, key, value, ttl=None):
        if not self.enabled:
            return
        try:
            self.backend.set(key, _encode(value), self.ttl if ttl is None else ttl)
        except (redis.RedisError, TypeError, ValueError) as e:
            logger.error(f"Translation cache write failed for {key}: {e}")

    def remember(self, key, ttl, producer):
        """Return the cached value for ``key`` or compute, store and return it.

        Concurrent misses on the same key inside this process wait for the
        first caller instead of running the producer again.
        """
        if not self.enabled:
            return producer()

        value = self._lookup(key)
        if value is not _MISS:
            return value

        lock = self._lock_for(key)
        try:
            with lock:
                value = self._lookup(key)
                if value is not _MISS:
                    return value

                value = producer()
                self.put(key, value, ttl)
                return value
        finally:
            self._release_lock(key)

    def _lookup(self, key):
        try:
            value = self.backend.get(key)
        except (redis.RedisError, ValueError) as e:
            logger.error(f"Translation cache read failed for {key}: {e}")
            return _MISS
        if value is _MISS:
            return _MISS
        return _decode(value)

    def forget(self, key):
        try:
            self.backend.delete(key)
        except redis.RedisError as e:
            logger.error(f"Translation cache delete failed for {key}: {e}")

    def generation(self, translatable_type) -> int:
        try:
            value = self.backend.get(self.generation_key(translatable_type))
        except (redis.RedisError, ValueError) as e:
            logger.error(f"Translation cache generation read failed: {e}")
            return 0
        return 0 if value is _MISS else int(value)

    def bump_generation(self, translatable_type):
        """Invalidate every cached bulk read that involves this type."""
        try:
            self.backend.incr(self.generation_key(translatable_type))
        except redis.RedisError as e:
            logger.error(f"Translation cache generation bump failed: {e}")

    def forget_entity(self, translatable_type, translatable_id, locale, fields=()):
        """Forget the ``all`` key and every per-field key of one record."""
        self.forget(self.entity_key(translatable_type, translatable_id, locale, 'all'))
        for field in fields:
            self.forget(self.entity_key(translatable_type, translatable_id, locale, field))
        self.bump_generation(translatable_type)

    def flush(self):
        """Drop every entry under this cache's prefix."""
        try:
            self.backend.clear(f'{self.prefix}.')
        except redis.RedisError as e:
            logger.error(f"Translation cache flush failed: {e}")
