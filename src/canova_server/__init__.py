"""canova_server — FastAPI REST API for the Canova form builder.

Exposes the FormService as a stateless HTTP API: project and form
management for authors, flow building and flowchart export for the
editor, and public form filling with response collection.
"""
