from protean.domain import Domain
from sqlalchemy import create_engine

SQL_PROVIDERS = ("sqlite", "postgresql")


def is_sql_provider(provider) -> bool:
    return provider.conn_info["provider"] in SQL_PROVIDERS


def setup_db(domain: Domain):
    """Setup database schema"""
    with domain.domain_context():
        for _, provider in domain.providers.items():
            if is_sql_provider(provider):
                engine = create_engine(provider.conn_info["database_uri"])

                # Accessing the _dao forces each aggregate and entity to be
                #   registered with the provider's SQLAlchemy metadata.
                for _, aggregate_record in domain.registry.aggregates.items():
                    if aggregate_record.cls.meta_.provider == provider.name:
                        domain.repository_for(aggregate_record.cls)._dao  # noqa: B018

                for _, entity_record in domain.registry.entities.items():
                    if entity_record.cls.meta_.provider == provider.name:
                        domain.repository_for(entity_record.cls)._dao  # noqa: B018

                provider._metadata.create_all(engine)


def drop_db(domain: Domain):
    """Drop database schema"""
    with domain.domain_context():
        for _, provider in domain.providers.items():
            if is_sql_provider(provider):
                engine = create_engine(provider.conn_info["database_uri"])
                provider._metadata.drop_all(engine)
