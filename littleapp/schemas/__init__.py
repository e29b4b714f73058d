# Schemas package init
"""
Little Application: Pydantic Request/Response Schemas
=======================================================

What:  The API contract: request bodies, single-record responses, and the
       shared envelopes in common.py.
How:   Schemas are separate from the SQLAlchemy models so the API controls
       exactly which fields are exposed (e.g. password hashes never are).
"""
