# Services package init
"""
FreePaste — Services Layer
============================

What:  Business logic layer sitting between routes (HTTP) and repositories (persistence).
How:   Services accept plain values, apply business rules, and return Pydantic
       records. The PasteService instance is built at startup and injected into
       routes via FastAPI's dependency injection.

Service Inventory:
    - id_generator: paste id and owner token generation
    - PasteService: create / get / raw / is_owner / edit / list-by-owner
"""
