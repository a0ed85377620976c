"""
MyWorkIn cohort analytics.

create_reports_service() wires logging, the Firestore reader, the alias
table (cached in Redis) and the clock into a UniversityReportsService.
"""


def create_reports_service(store=None, clock=None):
    """Create a configured UniversityReportsService."""
    from workin_analytics.analytics.aliases import AliasResolver
    from workin_analytics.logging_config import configure_logging
    from workin_analytics.services.alias_loader import load_alias_table
    from workin_analytics.services.reports import UniversityReportsService
    from workin_analytics.timeutils import utc_now

    configure_logging()

    if store is None:
        from workin_analytics.extensions import get_firestore_client
        from workin_analytics.services.firestore import FirestoreReader
        store = FirestoreReader(get_firestore_client())

    from workin_analytics.extensions import get_redis_client
    resolver = AliasResolver(load_alias_table(redis_client=get_redis_client()))

    return UniversityReportsService(store, resolver, clock or utc_now)
