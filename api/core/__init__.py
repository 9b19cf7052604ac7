"""
Shared, cross-cutting code for the API.

`core/` holds small building blocks that every feature uses
(DB wiring, cache backend, error taxonomy, id parsing). Keep feature-specific
SQL and business rules in the corresponding feature package
(e.g. `companies/`, `resources/`).
"""
