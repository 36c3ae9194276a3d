"""
Shared, cross-cutting code for the service.

`core/` holds small building blocks that multiple packages use
(DB wiring, settings, logging, error types). Provider parsing lives in
`providers/`; joke SQL and HTTP routes live in `jokes/`.
"""
