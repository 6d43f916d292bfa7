"""
Aquarium Log Backend: API Schemas
===================================

What:  Pydantic models for request bodies and response payloads, one
       module per resource plus `common` for pagination and errors.
       Kept separate from the ORM models so the API contract can change
       independently of the table layout.
"""
