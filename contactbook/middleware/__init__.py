# Middleware package init
"""
ContactBook Backend: Middleware Package
========================================

Middleware Chain (request direction):
    Request → [Request ID] → [Logging] → [Timeout] → [GZip] → [CORS] → Router

Request ID runs first so every later log line carries the ID; the timeout
sits inside logging so timed-out requests are still logged with their 504.
"""
