"""
Logos: a small FastAPI service for managing logo records.

Records live in a pluggable backend (in-memory or SQL), images go to an
S3-compatible bucket, and users may sign in with Google to have their
logos attributed to them.
"""
