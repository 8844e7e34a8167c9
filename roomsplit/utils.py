import logging

import jwt
from supabase import create_client
from fastapi import HTTPException, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from roomsplit.config import (
    JWT_ALGORITHM,
    JWT_SECRET,
    SUPABASE_KEY,
    SUPABASE_URL,
)

logger = logging.getLogger(__name__)

_supabase = None

def get_supabase_client():
    global _supabase
    if _supabase is not None:
        return _supabase
    if not SUPABASE_URL or not SUPABASE_KEY:
        raise RuntimeError("SUPABASE_URL and SUPABASE_KEY must be set in .env")
    _supabase = create_client(SUPABASE_URL, SUPABASE_KEY)
    return _supabase

# JWT auth dependency for this service
security = HTTPBearer()

def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)):
    """Decode the bearer JWT; ``sub`` is the caller's member id."""
    try:
        payload = dict(jwt.decode(credentials.credentials, JWT_SECRET, algorithms=[JWT_ALGORITHM]))
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        logger.info("Rejected bearer token")
        raise HTTPException(status_code=401, detail="Invalid token")
    if not payload.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid token: missing sub")
    return payload
