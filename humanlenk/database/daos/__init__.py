"""
DAOs Package: Data Access Layer (SQLAlchemy 2.0)
=================================================

Thin classes wrapping the ORM queries the service layer needs, one per
entity. DAOs never open sessions or commit; `@transactional` service
functions in `humanlenk.database.core.funcs` own the unit of work.

Contents
--------
- UserDao
    Users: create, lookup by id/email, admin listing with role and search
    filters, role/profile/password updates, counts by role and activity.

- ChatSessionDao
    Chat sessions: create, list by owner (latest activity first),
    owner-scoped lookup, recency bump, delete.

- UserMessagesDao
    Messages: create, chronological pages, the recent-context window,
    owner-scoped delete and delete-all, counts by role.

- FileDao
    Stored file metadata: create, filtered listing, owner-scoped lookup
    (optionally requiring a status), size/status/type aggregates.

- SurveyDao
    Surveys: create, latest per user (cooldown), pages and rating aggregates.

Notes
-----
- Ownership scoping is expressed as explicit `user_id` arguments; passing
  `None` where allowed means "all owners" and is reserved for administrators.
"""
