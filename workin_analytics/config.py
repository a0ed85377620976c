"""
Centralized configuration — env vars, collection names, university map.
"""
import os


# ── Redis (alias table cache) ────────────────────────────────────────────────
REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')
ALIAS_CACHE_KEY = 'aliases:universities'
ALIAS_CACHE_TTL = int(os.getenv('ALIAS_CACHE_TTL', '3600'))

# ── Firebase / Firestore ─────────────────────────────────────────────────────
FIREBASE_CREDENTIALS = os.getenv('FIREBASE_CREDENTIALS')
FIREBASE_PROJECT_ID = os.getenv('FIREBASE_PROJECT_ID')

# ── University aliases ───────────────────────────────────────────────────────
# Local YAML/JSON path or http(s) URL. Empty → bundled data/universities.yaml
UNIVERSITY_ALIASES_SOURCE = os.getenv('UNIVERSITY_ALIASES_SOURCE', '')
ALIAS_FETCH_TIMEOUT = float(os.getenv('ALIAS_FETCH_TIMEOUT', '10'))

UNSPECIFIED_ENTITY = 'No especificado / Otros'

# ── Invariant checks ─────────────────────────────────────────────────────────
# Raise instead of clamping when aggregate invariants break (development only)
STRICT_INVARIANTS = os.getenv('STRICT_INVARIANTS', '').lower() in ('1', 'true', 'yes')

# ── Firestore collections ────────────────────────────────────────────────────
COLLECTIONS = {
    'members': 'users',
    'events': 'creditTransactions',
    'reviews': 'cvReviews',
    'jobs': 'jobs',
    'interviews': 'interviews',
    'accounts': 'creditAccounts',
}

# ── Report universities — key → canonical name ───────────────────────────────
UNIVERSITY_KEYS = {
    'UPC':   'Universidad Peruana de Ciencias Aplicadas',
    'ULIMA': 'Universidad de Lima',
    'UTP':   'Universidad Tecnológica del Perú',
    'UPN':   'Universidad Privada del Norte',
}

# ── Tool display names ───────────────────────────────────────────────────────
TOOL_LABELS = {
    'cv-review':            'Análisis CV',
    'job-match':            'Búsqueda Empleos',
    'interview-simulation': 'Simulación Entrevista',
    'cv-creation':          'Creación CV',
}

# ── Activity thresholds (inclusive lower bounds) ─────────────────────────────
NEW_MIN_EVENTS = 1
ACTIVE_MIN_EVENTS = 3
POWER_MIN_EVENTS = 10

# ── Retention ────────────────────────────────────────────────────────────────
RETENTION_COHORT_MIN_AGE_DAYS = 30
RETENTION_WINDOWS = (1, 7, 30)
CHURN_INACTIVE_DAYS = 14

TOP_AREAS_LIMIT = 3
