"""
CritterTrack Backend — Middleware Package
=========================================

Middleware chain as registered in create_app():

    Request → [Request ID] → [Access Log] → [GZip] → [CORS] → Route Handler

The request id is set first so the access log line and any error body
produced further down carry it.
"""
