"""
IQScaler - User Service
Business logic for registration, login, password reset and admin account management
"""
import logging
import uuid

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from iqscaler.core.database import utcnow
from iqscaler.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    UpstreamServiceError,
    ValidationError,
)
from iqscaler.core.security import (
    create_access_token,
    generate_reset_token,
    get_password_hash,
    hash_reset_token,
    verify_password,
)
from iqscaler.models.user import User
from iqscaler.schemas.user import UserAdminUpdate, UserCreate
from iqscaler.services.email import Mailer

logger = logging.getLogger(__name__)

RESET_EMAIL_SUBJECT = "IQ Test Platform Password Reset Token"


def build_auth_payload(user: User) -> dict:
    """User fields plus a fresh bearer token."""
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "is_admin": user.is_admin,
        "token": create_access_token(subject=str(user.id)),
    }


class UserService:
    """Service for account operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register_user(self, user_data: UserCreate) -> User:
        """
        Register a new account.

        Raises:
            ConflictError: If the email or username is taken
        """
        existing = await self.db.execute(
            select(User).where(
                or_(User.email == user_data.email, User.username == user_data.username)
            )
        )
        if existing.scalars().first():
            raise ConflictError("User already exists")

        user = User(
            username=user_data.username,
            email=user_data.email,
            hashed_password=get_password_hash(user_data.password),
            is_admin=False,
        )

        self.db.add(user)
        await self.db.flush()
        await self.db.refresh(user)

        logger.info(f"User registered: {user.username}")
        return user

    async def authenticate(self, email: str, password: str) -> User:
        """
        Authenticate with email and password.

        Raises:
            AuthenticationError: If the credentials do not match
        """
        result = await self.db.execute(
            select(User).where(User.email == email)
        )
        user = result.scalar_one_or_none()

        if not user or not verify_password(password, user.hashed_password):
            logger.info(f"Failed login for {email}")
            raise AuthenticationError("Invalid email or password")

        return user

    async def get_user_by_id(self, user_id: str | uuid.UUID) -> User | None:
        """Get user by ID; malformed ids are treated as unknown."""
        if isinstance(user_id, str):
            try:
                user_id = uuid.UUID(user_id)
            except ValueError:
                return None

        result = await self.db.execute(
            select(User).where(User.id == user_id)
        )
        return result.scalar_one_or_none()

    async def forgot_password(self, email: str, base_url: str, mailer: Mailer) -> None:
        """
        Store a hashed reset token and email the plain one as a link.

        Raises:
            NotFoundError: If no account uses the email
            UpstreamServiceError: If the email cannot be sent; the token is discarded
        """
        result = await self.db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if not user:
            raise NotFoundError("User not found with that email address.")

        token, hashed, expires_at = generate_reset_token()
        user.reset_password_token = hashed
        user.reset_password_expire = expires_at
        await self.db.flush()

        reset_url = f"{base_url.rstrip('/')}/resetpassword/{token}"
        message = (
            "You are receiving this email because you (or someone else) requested "
            f"the reset of a password. Please open:\n\n {reset_url} \n\n"
            "If you did not request this, please ignore this email. "
            "This token is valid for 10 minutes."
        )

        try:
            await mailer.send(user.email, RESET_EMAIL_SUBJECT, message)
        except UpstreamServiceError:
            user.reset_password_token = None
            user.reset_password_expire = None
            await self.db.commit()
            raise

        logger.info(f"Password reset requested for user {user.id}")

    async def reset_password(self, token: str, password: str) -> None:
        """
        Set a new password using an emailed token.

        Raises:
            ValidationError: If the token is unknown or expired
        """
        result = await self.db.execute(
            select(User).where(
                User.reset_password_token == hash_reset_token(token),
                User.reset_password_expire > utcnow(),
            )
        )
        user = result.scalar_one_or_none()
        if not user:
            raise ValidationError("Invalid or expired reset token.")

        user.hashed_password = get_password_hash(password)
        user.reset_password_token = None
        user.reset_password_expire = None
        await self.db.flush()

        logger.info(f"Password reset for user {user.id}")

    # Admin

    async def list_users(self) -> list[User]:
        result = await self.db.execute(select(User).order_by(User.created_at))
        return list(result.scalars().all())

    async def get_user(self, user_id: uuid.UUID) -> User:
        user = await self.get_user_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def update_user(self, user_id: uuid.UUID, data: UserAdminUpdate) -> User:
        user = await self.get_user(user_id)

        if data.username:
            user.username = data.username
        if data.email:
            user.email = data.email
        if data.is_admin is not None:
            user.is_admin = data.is_admin

        await self.db.flush()
        await self.db.refresh(user)
        return user

    async def delete_user(self, user_id: uuid.UUID) -> None:
        """
        Raises:
            NotFoundError: If the user does not exist
            ValidationError: If the user is an administrator
        """
        user = await self.get_user(user_id)
        if user.is_admin:
            raise ValidationError("Cannot delete administrator accounts via this route.")

        await self.db.delete(user)
        await self.db.flush()
        logger.info(f"User {user_id} deleted")
