import json
import logging
import os
import time
import urllib.request
from typing import Any, Dict, List

from dotenv import load_dotenv
from fastapi import Depends, HTTPException, status, Request
from jose import jwt
from jose.exceptions import JWTError

load_dotenv()

logger = logging.getLogger("auth")

COGNITO_REGION = os.getenv("COGNITO_REGION", "ap-south-1")
COGNITO_USER_POOL_ID = os.getenv("COGNITO_USER_POOL_ID")
COGNITO_APP_CLIENT_ID = os.getenv("COGNITO_APP_CLIENT_ID")

COGNITO_ISSUER = f"https://cognito-idp.{COGNITO_REGION}.amazonaws.com/{COGNITO_USER_POOL_ID}"
COGNITO_JWKS_URL = f"{COGNITO_ISSUER}/.well-known/jwks.json"

# Cognito's public keys, refreshed once a day
jwks_cache = {
    "keys": [],
    "expiration_time": 0,
}


def get_jwks():
    global jwks_cache
    if jwks_cache["keys"] and jwks_cache["expiration_time"] > time.time():
        return jwks_cache["keys"]
    logger.info(f"Fetching JWKS from: {COGNITO_JWKS_URL}")
    try:
        with urllib.request.urlopen(COGNITO_JWKS_URL) as response:
            jwks_data = json.loads(response.read().decode("utf-8"))
    except (OSError, ValueError):
        logger.exception("Error fetching JWKS")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not fetch Cognito public keys for token validation."
        )
    jwks_cache = {
        "keys": jwks_data["keys"],
        "expiration_time": time.time() + (60 * 60 * 24)
    }
    return jwks_cache["keys"]


def get_current_user(request: Request) -> Dict[str, Any]:
    """
    FastAPI dependency validating the Cognito JWT from the Authorization header.

    Returns the decoded claims.
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header is missing",
        )

    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
        )
    token = parts[1]

    try:
        unverified_header = jwt.get_unverified_header(token)
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token header"
        )

    rsa_key = next(
        (
            {k: key[k] for k in ("kty", "kid", "use", "n", "e")}
            for key in get_jwks()
            if key["kid"] == unverified_header.get("kid")
        ),
        None,
    )
    if not rsa_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unable to find a matching public key to verify the token",
        )

    try:
        return jwt.decode(
            token,
            rsa_key,
            algorithms=["RS256"],
            audience=COGNITO_APP_CLIENT_ID,
            issuer=COGNITO_ISSUER,
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired"
        )
    except jwt.JWTClaimsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token claims: {e}"
        )
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Token validation failed: {e}"
        )


def get_user_identifier(user: Dict[str, Any]) -> str:
    """Name recorded in created_by/updated_by and audit rows."""
    if not user:
        return "unknown"
    return (
        user.get("email")
        or user.get("cognito:username")
        or user.get("username")
        or user.get("sub")
        or "unknown"
    )


def require_group(allowed_groups: List[str]):
    """Dependency factory: the caller must belong to at least one of ``allowed_groups``."""
    def checker(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        groups = user.get("cognito:groups") or []
        if not set(groups) & set(allowed_groups):
            logger.warning(f"User {get_user_identifier(user)} denied; requires one of {allowed_groups}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to perform this action",
            )
        return user
    return checker
