"""
The `database` package holds everything that touches the relational store.

Contents:
    - config:
        Settings, engine/session factory construction and logging setup.

    - entities:
        SQLAlchemy entity models (users, chat sessions, messages, files, surveys).

    - daos:
        Data Access Objects providing the queries for each entity.

    - core:
        Transactional service functions used by the API routers; they return
        plain dictionaries ready to be serialised.

    - helpers:
        The `@transactional` unit-of-work decorator.
"""
