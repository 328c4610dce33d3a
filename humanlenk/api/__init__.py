"""
API Package: Routers • Models • JWT Utils • Chat Orchestration • S3
====================================================================

Mission
-------
This package defines the backend's HTTP interface and its support stack:
FastAPI routing, bearer-token auth, the chat turn flow with its completion
adapter, and S3 file delivery.

Contents
--------
- routers
    One FastAPI router per resource: health, auth, chat, files, admin, surveys.

- models
    Pydantic request bodies (registration, credentials, profile and password
    changes, chat messages, sessions, role updates, surveys).

- utils
    JWT helpers:
      • create_access_token(payload, settings): signs HS256 tokens with exp/iss/aud
      • verify_token(token, settings): returns `sub` or None
      • parse_uuid(value): lenient id parsing

- dependencies
    Providers for settings, session factory, S3 client and completion service
    (all living on `app.state`), plus `get_current_user` / `require_admin`.

- errors
    `AppError` and the exception handlers producing `{success: false, error}` bodies.

- prompt_utilities
    Context assembly: recent history → LangChain messages with the system prompt.

- completion_service
    `CompletionService` around `ChatOpenAI`, returning `CompletionResult`
    instead of raising.

- chat_handler
    The per-turn state machine (verify, persist, complete, persist, touch).

- aws_bucket_funcs.funcs
    S3 client construction, upload, delete and presigned download URLs.
"""
