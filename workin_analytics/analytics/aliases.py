"""
University alias table + resolver.

Maps noisy free-text university names onto canonical names:

  1. normalize the raw text
  2. exact table lookup (unambiguous, always wins)
  3. ordered contains-rules, first match wins — rule order is a manual
     priority list, so specific needles must precede generic ones
  4. fall back to the trimmed raw text, or UNSPECIFIED_ENTITY when empty

Resolution is not idempotent in general (a canonical name need not match its
own rules), so raw strings are resolved once at ingestion and the result is
treated as opaque afterwards.
"""
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from workin_analytics.analytics.normalization import normalize
from workin_analytics.config import UNSPECIFIED_ENTITY
from workin_analytics.errors import AliasLoadFailure

logger = logging.getLogger('analytics.aliases')


@dataclass(frozen=True)
class AliasRule:
    needle: str
    canonical: str


@dataclass
class AliasTable:
    """Normalized exact map + ordered contains-rules."""
    exact: Dict[str, str] = field(default_factory=dict)
    contains: List[AliasRule] = field(default_factory=list)

    @classmethod
    def empty(cls) -> 'AliasTable':
        return cls()

    @classmethod
    def from_mapping(cls, data: Any) -> 'AliasTable':
        """Build from {'exact': {alias: canon}, 'contains': [{'needle', 'canon'}]}.

        Raises AliasLoadFailure when the structure is unusable.
        """
        if not isinstance(data, dict):
            raise AliasLoadFailure(f"alias table must be a mapping, got {type(data).__name__}")

        raw_exact = data.get('exact') or {}
        raw_contains = data.get('contains') or []
        if not isinstance(raw_exact, dict) or not isinstance(raw_contains, list):
            raise AliasLoadFailure("alias table needs an 'exact' mapping and a 'contains' list")

        exact = {}
        for alias, canonical in raw_exact.items():
            key = normalize(alias)
            if not key or not isinstance(canonical, str) or not canonical.strip():
                logger.warning("Skipping unusable exact alias %r → %r", alias, canonical)
                continue
            exact.setdefault(key, canonical.strip())

        contains = []
        for rule in raw_contains:
            if not isinstance(rule, dict):
                logger.warning("Skipping non-mapping contains rule %r", rule)
                continue
            needle = normalize(rule.get('needle'))
            canonical = rule.get('canon') or rule.get('canonical')
            if not needle or not isinstance(canonical, str) or not canonical.strip():
                logger.warning("Skipping unusable contains rule %r", rule)
                continue
            contains.append(AliasRule(needle=needle, canonical=canonical.strip()))

        return cls(exact=exact, contains=contains)

    def to_mapping(self) -> Dict[str, Any]:
        return {
            'exact': dict(self.exact),
            'contains': [{'needle': r.needle, 'canon': r.canonical} for r in self.contains],
        }

    @property
    def is_empty(self) -> bool:
        return not self.exact and not self.contains


class AliasResolver:
    """Resolve raw university text to a canonical name against an injected table."""

    def __init__(self, table: Optional[AliasTable] = None, fallback: str = UNSPECIFIED_ENTITY):
        self.table = table or AliasTable.empty()
        self.fallback = fallback
        self._cache: Dict[str, str] = {}

    def resolve(self, raw: Optional[str]) -> str:
        key = raw if isinstance(raw, str) else ''
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        canonical = self._resolve(key)
        self._cache[key] = canonical
        return canonical

    def _resolve(self, raw: str) -> str:
        norm = normalize(raw)
        if norm:
            exact = self.table.exact.get(norm)
            if exact:
                return exact
            for rule in self.table.contains:
                if rule.needle in norm:
                    return rule.canonical
        return raw.strip() or self.fallback

    def resolve_many(self, raws: Iterable[Optional[str]]) -> List[str]:
        return [self.resolve(raw) for raw in raws]

    def group_by_entity(self, members) -> 'OrderedDict[str, list]':
        """Group members by canonical university, keys sorted by name."""
        groups: Dict[str, list] = {}
        for member in members:
            groups.setdefault(self.resolve(member.university), []).append(member)
        return OrderedDict(sorted(groups.items()))

    def members_of(self, members, canonical: str) -> list:
        return [m for m in members if self.resolve(m.university) == canonical]
