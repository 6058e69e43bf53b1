import logging
import time

import httpx
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from .config import CLERK_ISSUER, CLERK_JWKS_URL
from .database import get_db
from .domain.profiles.repository import ProfileRepository
from .models import Profile

logger = logging.getLogger(__name__)

security = HTTPBearer()

# Cache for Clerk's signing keys, keyed by kid
_cached_keys = None


async def get_clerk_signing_keys():
    """Fetch Clerk's JWKS for session token verification"""
    global _cached_keys
    if _cached_keys:
        logger.debug("✅ Using cached Clerk signing keys")
        return _cached_keys

    try:
        async with httpx.AsyncClient(timeout=10) as client:
            response = await client.get(CLERK_JWKS_URL)
            if response.status_code == 200:
                _cached_keys = {key["kid"]: key for key in response.json().get("keys", [])}
                logger.info(f"✅ Fetched {len(_cached_keys)} Clerk signing keys")
                return _cached_keys
            else:
                logger.error(f"❌ Failed to fetch Clerk signing keys: HTTP {response.status_code}")
    except Exception as e:
        logger.error(f"❌ Error fetching Clerk signing keys: {str(e)}")
    return None


async def verify_session_token(token: str) -> dict:
    """
    Verify a Clerk session JWT against the instance's JWKS.
    Checks the RS256 signature, issuer and expiry.
    """
    global _cached_keys

    if not CLERK_ISSUER or not CLERK_JWKS_URL:
        logger.error("❌ CLERK_ISSUER not configured")
        raise HTTPException(status_code=500, detail="Authentication not configured")

    try:
        header = jwt.get_unverified_header(token)
    except JWTError as e:
        logger.error(f"❌ Failed to decode token header: {str(e)}")
        raise HTTPException(status_code=401, detail="Invalid token header") from e

    kid = header.get("kid")
    if header.get("alg") != "RS256" or not kid:
        logger.error(f"❌ Invalid token header: alg={header.get('alg')}, kid={kid}")
        raise HTTPException(status_code=401, detail="Invalid token algorithm")

    signing_keys = await get_clerk_signing_keys()
    if not signing_keys or kid not in signing_keys:
        logger.warning(f"⚠️ Key ID {kid} not found in signing keys, invalidating cache and retrying")
        _cached_keys = None
        signing_keys = await get_clerk_signing_keys()
        if not signing_keys or kid not in signing_keys:
            logger.error(f"❌ Key ID {kid} not found in signing keys after retry")
            raise HTTPException(status_code=401, detail="Unable to verify token signature")

    try:
        claims = jwt.decode(
            token,
            signing_keys[kid],
            algorithms=["RS256"],
            issuer=CLERK_ISSUER,
            options={"verify_aud": False},
        )
    except jwt.ExpiredSignatureError as e:
        raise HTTPException(
            status_code=401,
            detail="Token has expired. Please refresh your session.",
            headers={"X-Token-Expired": "true"},
        ) from e
    except JWTError as e:
        logger.error(f"❌ Token verification failed: {str(e)}")
        raise HTTPException(status_code=401, detail="Token verification failed") from e

    # Token should not be from the future (allow 60 seconds clock skew)
    if claims.get("nbf", 0) > time.time() + 60:
        logger.warning("⚠️ Token not yet valid")
        raise HTTPException(status_code=401, detail="Invalid token")

    return claims


async def get_current_profile(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> Profile:
    """Get the member profile for the Clerk session token"""
    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    token = credentials.credentials
    if len(token.split(".")) != 3:
        logger.warning(f"⚠️ Malformed token received, length: {len(token)}")
        raise HTTPException(
            status_code=401, detail="Invalid token format. Expected a valid JWT token."
        )

    claims = await verify_session_token(token)
    clerk_user_id = claims.get("sub")
    if not clerk_user_id:
        logger.error(f"❌ Token missing sub claim. Available claims: {list(claims.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims")

    profile = ProfileRepository.get_by_auth_id(db, clerk_user_id)
    if not profile:
        # Profiles are created during onboarding; a signed-in user may not have one yet
        logger.info(f"ℹ️ No profile for Clerk user {clerk_user_id}")
        raise HTTPException(status_code=404, detail="Profile not found")

    logger.debug(f"✅ Profile authenticated: {profile.id}")
    return profile


async def get_current_admin(profile: Profile = Depends(get_current_profile)) -> Profile:
    """Get current profile and verify it holds the app admin capability"""
    if not profile.is_app_admin:
        logger.warning(f"⚠️ Profile {profile.id} attempted to access an admin route")
        raise HTTPException(status_code=403, detail="Access denied - admin only")
    return profile
