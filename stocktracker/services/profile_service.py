"""Profile icon storage. Icons live inline on the user row as data URLs."""
import base64
import logging
from sqlalchemy.ext.asyncio import AsyncSession

from stocktracker.models.user import User
from stocktracker.core.errors import NotFound

logger = logging.getLogger(__name__)


class ProfileService:
    """Service for profile icon updates."""

    @staticmethod
    def to_data_url(content_type: str, data: bytes) -> str:
        return f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"

    @staticmethod
    def validate_icon(content_type: str, data: bytes, max_bytes: int) -> None:
        """
        Raises:
            ValueError: If the upload is empty, not an image or too large
        """
        if not data:
            raise ValueError("No file uploaded")
        if not content_type or not content_type.startswith("image/"):
            raise ValueError("Only image files are allowed")
        if len(data) > max_bytes:
            raise ValueError(f"Icon exceeds the {max_bytes} byte limit")

    @staticmethod
    async def update_icon(
        user: User,
        content_type: str,
        data: bytes,
        db: AsyncSession,
        max_bytes: int
    ) -> str:
        """
        Validate and store a new profile icon.

        Returns:
            The stored data URL
        """
        ProfileService.validate_icon(content_type, data, max_bytes)

        user.icon = ProfileService.to_data_url(content_type, data)
        await db.commit()

        logger.info(f"Profile icon updated for user {user.id} ({content_type}, {len(data)} bytes)")
        return user.icon

    @staticmethod
    def get_icon(user: User) -> str:
        """
        Raises:
            NotFound: If the user has no icon
        """
        if not user.icon:
            raise NotFound("Profile icon not found")
        return user.icon
