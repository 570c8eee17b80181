"""Conversation repository for database operations."""

from datetime import datetime
from typing import Optional, List, Dict, Any
from .base import BaseRepository
from ..database_models.conversation import ConversationDO, ConversationStatus


_COLUMNS = """
    id, topic, session_id, status, current_turn, max_turns, is_active,
    started_at, ended_at, last_activity, user_id
"""

# Columns that may be changed through update(); activity state goes through end()
_UPDATABLE = ("topic", "status", "max_turns", "last_activity")


class ConversationRepository(BaseRepository):
    """Repository for Conversation CRUD operations."""

    @staticmethod
    def _to_do(row) -> ConversationDO:
        return ConversationDO(
            id=row[0],
            topic=row[1],
            session_id=row[2],
            status=row[3],
            current_turn=row[4],
            max_turns=row[5],
            is_active=bool(row[6]),
            started_at=row[7],
            ended_at=row[8],
            last_activity=row[9],
            user_id=row[10]
        )

    def create(self, conversation: ConversationDO) -> Optional[int]:
        """
        Create a new conversation record.

        Args:
            conversation: ConversationDO instance

        Returns:
            New conversation ID if successful, None otherwise
        """
        try:
            result = self.conn.execute(f"""
                INSERT INTO conversations ({_COLUMNS})
                VALUES (nextval('conversations_id_seq'), ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                RETURNING id
            """, [
                conversation.topic,
                conversation.session_id,
                conversation.status,
                conversation.current_turn,
                conversation.max_turns,
                conversation.is_active,
                conversation.started_at,
                conversation.ended_at,
                conversation.last_activity,
                conversation.user_id
            ]).fetchone()
            self.conn.commit()

            conversation.id = result[0] if result else None
            self.logger.info(f"Created conversation record: {conversation.id}")
            return conversation.id
        except Exception as e:
            self.logger.error(f"Failed to create conversation: {e}")
            return None

    def get(self, conversation_id: int) -> Optional[ConversationDO]:
        """
        Get conversation by ID.

        Args:
            conversation_id: Conversation ID

        Returns:
            ConversationDO instance or None
        """
        try:
            result = self.conn.execute(f"""
                SELECT {_COLUMNS}
                FROM conversations
                WHERE id = ?
            """, [conversation_id]).fetchone()

            return self._to_do(result) if result else None
        except Exception as e:
            self.logger.error(f"Failed to get conversation {conversation_id}: {e}")
            return None

    def list_visible(self, user_id: int) -> List[ConversationDO]:
        """
        List conversations owned by a user plus unowned ones.

        Args:
            user_id: Requesting user ID

        Returns:
            List of ConversationDO instances, newest first
        """
        try:
            results = self.conn.execute(f"""
                SELECT {_COLUMNS}
                FROM conversations
                WHERE user_id IS NULL OR user_id = ?
                ORDER BY started_at DESC, id DESC
            """, [user_id]).fetchall()

            return [self._to_do(row) for row in results]
        except Exception as e:
            self.logger.error(f"Failed to list conversations for user {user_id}: {e}")
            return []

    def list_all(self) -> List[ConversationDO]:
        """List all conversations, newest first."""
        try:
            results = self.conn.execute(f"""
                SELECT {_COLUMNS}
                FROM conversations
                ORDER BY started_at DESC, id DESC
            """).fetchall()

            return [self._to_do(row) for row in results]
        except Exception as e:
            self.logger.error(f"Failed to list all conversations: {e}")
            return []

    def end(self, conversation_id: int) -> bool:
        """
        Mark an active conversation as ended.

        Only the caller that flips the row from active to ended gets True, so
        concurrent enders can tell which of them owns the transition.

        Args:
            conversation_id: Conversation ID

        Returns:
            True if this call ended the conversation, False otherwise
        """
        try:
            now = datetime.utcnow()
            result = self.conn.execute("""
                UPDATE conversations
                SET is_active = FALSE, status = ?, ended_at = ?, last_activity = ?
                WHERE id = ? AND is_active = TRUE
                RETURNING id
            """, [ConversationStatus.COMPLETED.value, now, now, conversation_id]).fetchone()
            self.conn.commit()
            return result is not None
        except Exception as e:
            self.logger.error(f"Failed to end conversation {conversation_id}: {e}")
            return False

    def increment_turn(self, conversation_id: int) -> bool:
        """Advance the turn counter by one."""
        try:
            self.conn.execute("""
                UPDATE conversations
                SET current_turn = current_turn + 1, last_activity = ?
                WHERE id = ?
            """, [datetime.utcnow(), conversation_id])
            self.conn.commit()
            return True
        except Exception as e:
            self.logger.error(f"Failed to increment turn for conversation {conversation_id}: {e}")
            return False

    def update(self, conversation_id: int, updates: Dict[str, Any]) -> bool:
        """
        Update conversation fields.

        Args:
            conversation_id: Conversation ID
            updates: Dictionary of fields to update

        Returns:
            True if successful, False otherwise
        """
        columns = [column for column in _UPDATABLE if column in updates]
        if not columns:
            return True

        try:
            assignments = ", ".join(f"{column} = ?" for column in columns)
            self.conn.execute(
                f"UPDATE conversations SET {assignments} WHERE id = ?",
                [updates[column] for column in columns] + [conversation_id]
            )
            self.conn.commit()
            return True
        except Exception as e:
            self.logger.error(f"Failed to update conversation {conversation_id}: {e}")
            return False
