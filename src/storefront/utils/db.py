"""Schema management for SQL-backed storefront providers.

The default configuration runs on the in-memory provider, for which both
functions are no-ops.
"""

from protean.domain import Domain
from sqlalchemy import create_engine

_SQL_PROVIDERS = ("sqlite", "postgresql")


def _sql_providers(domain: Domain):
    return [provider for provider in domain.providers.values() if provider.conn_info["provider"] in _SQL_PROVIDERS]


def setup_db(domain: Domain) -> None:
    """Create the tables of every aggregate and entity stored in a SQL provider."""
    with domain.domain_context():
        elements = [record.cls for record in domain.registry.aggregates.values()]
        elements += [record.cls for record in domain.registry.entities.values()]

        for provider in _sql_providers(domain):
            # Resolving the DAO registers the element's model on the provider's metadata
            for element in elements:
                if element.meta_.provider == provider.name:
                    domain.repository_for(element)._dao  # noqa: B018

            provider._metadata.create_all(create_engine(provider.conn_info["database_uri"]))


def drop_db(domain: Domain) -> None:
    with domain.domain_context():
        for provider in _sql_providers(domain):
            provider._metadata.drop_all(create_engine(provider.conn_info["database_uri"]))
