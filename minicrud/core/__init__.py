"""
Core utilities shared across the minicrud service.

This package hosts:
- configuration helpers (env vars, data paths)
- the error taxonomy every service raises
- cross-cutting helpers such as password hashing, logging setup and
  rate limiting.

Services and repositories depend on these primitives instead of importing
FastAPI or reading os.environ directly.
"""
