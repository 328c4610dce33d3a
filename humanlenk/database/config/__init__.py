"""
The `config` package provides the building blocks for configuring the process
and establishing database connections.

Contents:
    - config: Configuration layer - strongly typed app settings loaded from environment variables (with .env support), built once by `get_settings()`
    - connection_engine: Database layer - SQLAlchemy bootstrap that constructs a connection URL from those settings, creates the Engine and session factory, shared MetaData, and the declarative base for ORM models
    - logging_config: `dictConfig`-based logging set-up driven by the same settings

Together they provide secure, environment-driven configuration and a clean ORM foundation.
"""
