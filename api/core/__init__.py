"""
Shared, cross-cutting code for the wiki service.

`core/` should contain small building blocks that multiple features use
(DB wiring, settings, errors, rendering, the gist client). Keep
feature-specific SQL and business logic in the corresponding feature package
(e.g. `pages/`).
"""
