"""
API server package: HTTP/REST interface.

Exposes the trust engine to clients: POST /analyze, GET /health and GET /profiles.
"""
