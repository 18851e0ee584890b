"""
FastAPI routers grouped by domain (auth, records, action dispatch).

Each module exposes an APIRouter that app.py includes. Routers only decode
requests and render envelopes; the rules live in minicrud.services.
"""
