"""User repository for database operations."""

from typing import Optional
from .base import BaseRepository
from ..database_models.user import UserDO


class UserRepository(BaseRepository):
    """Repository for User operations."""

    def create(self, user: UserDO) -> Optional[int]:
        """
        Create a new user record.

        Args:
            user: UserDO instance

        Returns:
            New user ID if successful, None otherwise
        """
        try:
            result = self.conn.execute("""
                INSERT INTO users (id, username, created_at)
                VALUES (nextval('users_id_seq'), ?, ?)
                RETURNING id
            """, [user.username, user.created_at]).fetchone()
            self.conn.commit()

            user.id = result[0] if result else None
            self.logger.info(f"Created user record: {user.id} ({user.username})")
            return user.id
        except Exception as e:
            self.logger.error(f"Failed to create user {user.username}: {e}")
            return None

    def get(self, user_id: int) -> Optional[UserDO]:
        """Get user by ID."""
        try:
            result = self.conn.execute("""
                SELECT id, username, created_at FROM users WHERE id = ?
            """, [user_id]).fetchone()

            if result:
                return UserDO(id=result[0], username=result[1], created_at=result[2])
            return None
        except Exception as e:
            self.logger.error(f"Failed to get user {user_id}: {e}")
            return None

    def get_by_username(self, username: str) -> Optional[UserDO]:
        """Get user by username."""
        try:
            result = self.conn.execute("""
                SELECT id, username, created_at FROM users WHERE username = ?
            """, [username]).fetchone()

            if result:
                return UserDO(id=result[0], username=result[1], created_at=result[2])
            return None
        except Exception as e:
            self.logger.error(f"Failed to get user {username}: {e}")
            return None
