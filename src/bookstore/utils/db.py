"""Schema management for SQL-backed providers.

The memory provider needs no schema, so both functions skip it and report
which providers they touched.
"""

import structlog
from protean.domain import Domain
from sqlalchemy import create_engine

logger = structlog.get_logger(__name__)

_SQL_PROVIDERS = ("sqlite", "postgresql")


def _sql_providers(domain: Domain):
    for name, provider in domain.providers.items():
        if provider.conn_info["provider"] in _SQL_PROVIDERS:
            yield name, provider


def setup_db(domain: Domain) -> list[str]:
    """Create tables for every aggregate and entity that lives on a SQL provider."""
    prepared = []
    with domain.domain_context():
        for name, provider in _sql_providers(domain):
            engine = create_engine(provider.conn_info["database_uri"])

            # Touching the DAO registers the element's table on the provider's metadata
            for registry in (domain.registry.aggregates, domain.registry.entities):
                for _, record in registry.items():
                    if record.cls.meta_.provider == name:
                        domain.repository_for(record.cls)._dao  # noqa: B018

            if hasattr(domain, "_outbox_repos") and name in domain._outbox_repos:
                domain._outbox_repos[name]._dao  # noqa: B018

            provider._metadata.create_all(engine)
            prepared.append(name)
            logger.info("Database schema created", provider=name)

    return prepared


def drop_db(domain: Domain) -> list[str]:
    """Drop every table known to the domain's SQL providers."""
    dropped = []
    with domain.domain_context():
        for name, provider in _sql_providers(domain):
            engine = create_engine(provider.conn_info["database_uri"])
            provider._metadata.drop_all(engine)
            dropped.append(name)
            logger.info("Database schema dropped", provider=name)

    return dropped
