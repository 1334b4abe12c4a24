import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Tuple
from passlib.context import CryptContext
from jose import ExpiredSignatureError, JWTError, jwt
from ..crud import UserStore
from ..errors import AuthError, ValidationError
from ..models import User

logger = logging.getLogger(__name__)

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ALGORITHM = "HS256"
PASSWORD_SYMBOLS = "@$!%*?&"
INVALID_CREDENTIALS = "Invalid credentials"

_PASSWORD_RULES = [
    (re.compile(r"[a-z]"), "Password must contain at least one lowercase letter"),
    (re.compile(r"[A-Z]"), "Password must contain at least one uppercase letter"),
    (re.compile(r"\d"), "Password must contain at least one number"),
    (re.compile(f"[{re.escape(PASSWORD_SYMBOLS)}]"),
     f"Password must contain at least one special character ({PASSWORD_SYMBOLS})"),
]


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def check_password_strength(password: str) -> None:
    """Raise ValidationError naming the first password rule not met."""
    if len(password) < 8:
        raise ValidationError("Password must be at least 8 characters long")
    for pattern, message in _PASSWORD_RULES:
        if not pattern.search(password):
            raise ValidationError(message)


def create_access_token(user: User, secret: str, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    to_encode = {"sub": user.id, "email": user.email, "iat": now, "exp": now + expires_delta}
    return jwt.encode(to_encode, secret, algorithm=ALGORITHM)


def decode_access_token(token: str, secret: str) -> str:
    """Verify a token's signature and expiry.

    Returns:
        The user id carried in the ``sub`` claim

    Raises:
        AuthError: If the token is expired, tampered with or malformed
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise AuthError("Token has expired")
    except JWTError:
        raise AuthError("Invalid token")
    user_id = payload.get("sub")
    if not user_id:
        raise AuthError("Invalid token")
    return user_id


class AuthService:
    """Signup, login and token resolution.

    Attributes:
        users: Credential store
        secret: Token signing secret
        token_lifetime: How long issued tokens stay valid
    """

    def __init__(self, users: UserStore, secret: str, token_lifetime: timedelta = timedelta(days=7)):
        self.users = users
        self.secret = secret
        self.token_lifetime = token_lifetime

    def issue_token(self, user: User) -> str:
        return create_access_token(user, self.secret, self.token_lifetime)

    def signup(self, email: str, password: str) -> Tuple[User, str]:
        """Register a new user and issue a token.

        Raises:
            ValidationError: Weak password or email already registered
        """
        check_password_strength(password)
        if self.users.get_user_by_email(email) is not None:
            raise ValidationError("User already exists with this email")
        user = self.users.create_user(email, get_password_hash(password))
        logger.info(f"User {user.id} signed up")
        return user, self.issue_token(user)

    def login(self, email: str, password: str) -> Tuple[User, str]:
        """Check credentials and issue a token.

        Unknown email and wrong password fail with the same error.

        Raises:
            AuthError: If the credentials do not match
        """
        user = self.users.get_user_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            logger.info("Login failed: invalid credentials")
            raise AuthError(INVALID_CREDENTIALS)
        return user, self.issue_token(user)

    def authenticate(self, token: str) -> User:
        """Resolve a bearer token to its user.

        Raises:
            AuthError: Invalid or expired token, or the user no longer exists
        """
        user_id = decode_access_token(token, self.secret)
        user = self.users.get_user(user_id)
        if user is None:
            raise AuthError("Invalid token")
        return user
