"""
Document store readers.

The analytics core only needs "every record of collection X" as
(doc_id, dict) pairs; both readers here expose exactly that.
"""
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

logger = logging.getLogger('services.firestore')

Document = Tuple[str, Dict[str, Any]]


class FirestoreReader:
    """Read-only full-collection fetches over a firebase_admin Firestore client."""

    def __init__(self, client):
        self.client = client

    def fetch_all(self, collection: str) -> List[Document]:
        """All documents in `collection`. Fetch errors are logged and yield []."""
        try:
            docs = [(snap.id, snap.to_dict() or {}) for snap in self.client.collection(collection).stream()]
        except Exception as e:
            logger.warning("Failed to fetch collection %r: %s", collection, e, extra={'collection': collection})
            return []
        logger.debug("Fetched %d documents from %r", len(docs), collection, extra={'collection': collection})
        return docs


class InMemoryReader:
    """Reader over pre-loaded documents, for offline exports and tests."""

    def __init__(self, collections: Optional[Mapping[str, Iterable[Document]]] = None):
        self.collections = {name: list(docs) for name, docs in (collections or {}).items()}

    def fetch_all(self, collection: str) -> List[Document]:
        return list(self.collections.get(collection, []))
