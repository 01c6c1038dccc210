"""Service layer for business logic.

Layer hierarchy:
    Routes (HTTP) -> Controllers -> Services -> Repositories (Database)

Services should:
- Compute pagination and enforce existence before every mutation
- Hold per-resource rules in ``ServiceHooks`` callbacks
- Let NotFoundError and PersistenceError bubble unchanged

Services should NOT:
- Execute SQL directly (use repositories)
- Validate request payloads (controllers do that with schemas)
- Know about HTTP status codes or the response envelope
"""
