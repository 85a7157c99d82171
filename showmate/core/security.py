from jose import ExpiredSignatureError, JWTError, jwt
from showmate.config import settings
from showmate.core.exceptions import UnauthorizedException


def decode_jwt(token: str) -> dict:
    """
    Verify a bearer token issued by the identity provider.

    Tokens are HS256-signed with the shared SECRET_KEY and must carry
    both an expiry ('exp') and the user uid ('sub').

    Raises:
        UnauthorizedException: If the token is expired, badly signed or incomplete
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise UnauthorizedException("Token expired")
    except JWTError as e:
        raise UnauthorizedException(f"Invalid token: {e}")

    # jose only validates 'exp' when present
    if "exp" not in payload:
        raise UnauthorizedException("Token missing expiration")

    uid = payload.get("sub")
    if not isinstance(uid, str) or not uid:
        raise UnauthorizedException("Token missing user identifier")

    return payload


def verify_token(token: str) -> str:
    """Return the uid of the principal a valid bearer token was issued to"""
    return decode_jwt(token)["sub"]
