"""
HTTP routers, one module per resource:

- health   : liveness probe
- auth     : registration, login, profile and password management
- chat     : chat turns, sessions and messages
- files    : uploads to S3 and file metadata
- admin    : administrator-only listings, moderation and statistics
- surveys  : satisfaction surveys
"""
