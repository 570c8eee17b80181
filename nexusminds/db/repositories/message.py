"""Message repository for database operations."""

import json
from typing import Optional, List
from .base import BaseRepository
from ..database_models.message import MessageDO


_COLUMNS = """
    id, conversation_id, agent_personality_id, content, message_type, token_count,
    process_time, model, temperature, metadata, is_edited, timestamp
"""


class MessageRepository(BaseRepository):
    """Repository for Message CRUD operations."""

    def _to_do(self, row) -> MessageDO:
        return MessageDO(
            id=row[0],
            conversation_id=row[1],
            agent_personality_id=row[2],
            content=row[3],
            message_type=row[4],
            token_count=row[5],
            process_time=row[6],
            model=row[7],
            temperature=row[8],
            metadata=self._load_json(row[9], {}),
            is_edited=bool(row[10]),
            timestamp=row[11]
        )

    def _references_exist(self, message: MessageDO) -> bool:
        result = self.conn.execute("""
            SELECT
                EXISTS (SELECT 1 FROM conversations WHERE id = ?),
                EXISTS (SELECT 1 FROM agent_personalities WHERE id = ?)
        """, [message.conversation_id, message.agent_personality_id]).fetchone()
        return bool(result and result[0] and result[1])

    def add(self, message: MessageDO) -> Optional[int]:
        """
        Add a new message.

        Args:
            message: MessageDO instance

        Returns:
            Message ID if successful, None otherwise
        """
        try:
            if not self._references_exist(message):
                self.logger.error(
                    f"Refusing message for missing conversation {message.conversation_id} "
                    f"or personality {message.agent_personality_id}"
                )
                return None

            result = self.conn.execute(f"""
                INSERT INTO messages ({_COLUMNS})
                VALUES (nextval('messages_id_seq'), ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                RETURNING id
            """, [
                message.conversation_id,
                message.agent_personality_id,
                message.content,
                message.message_type,
                message.token_count,
                message.process_time,
                message.model,
                message.temperature,
                json.dumps(message.metadata or {}),
                message.is_edited,
                message.timestamp
            ]).fetchone()

            message.id = result[0] if result else None
            if message.id:
                self.conn.commit()
                self.logger.debug(f"Added message {message.id} to conversation {message.conversation_id}")
            return message.id
        except Exception as e:
            self.logger.error(f"Failed to add message: {e}")
            return None

    def get(self, message_id: int) -> Optional[MessageDO]:
        """Get message by ID."""
        try:
            result = self.conn.execute(f"""
                SELECT {_COLUMNS}
                FROM messages
                WHERE id = ?
            """, [message_id]).fetchone()

            return self._to_do(result) if result else None
        except Exception as e:
            self.logger.error(f"Failed to get message {message_id}: {e}")
            return None

    def get_by_conversation(self, conversation_id: int, limit: Optional[int] = None) -> List[MessageDO]:
        """
        Get messages for a conversation.

        Args:
            conversation_id: Conversation ID
            limit: Optional maximum number of most recent messages

        Returns:
            List of MessageDO instances (chronological order)
        """
        try:
            if limit is None:
                results = self.conn.execute(f"""
                    SELECT {_COLUMNS}
                    FROM messages
                    WHERE conversation_id = ?
                    ORDER BY timestamp ASC, id ASC
                """, [conversation_id]).fetchall()
                return [self._to_do(row) for row in results]

            results = self.conn.execute(f"""
                SELECT {_COLUMNS}
                FROM messages
                WHERE conversation_id = ?
                ORDER BY timestamp DESC, id DESC
                LIMIT ?
            """, [conversation_id, limit]).fetchall()

            messages = [self._to_do(row) for row in results]

            # Reverse to get chronological order
            messages.reverse()
            return messages
        except Exception as e:
            self.logger.error(f"Failed to get conversation messages: {e}")
            return []

    def count_by_personality(self, personality_id: int) -> int:
        """Count messages written by an agent personality."""
        try:
            result = self.conn.execute("""
                SELECT COUNT(*) FROM messages WHERE agent_personality_id = ?
            """, [personality_id]).fetchone()
            return result[0] if result else 0
        except Exception as e:
            self.logger.error(f"Failed to count messages for personality {personality_id}: {e}")
            return 0

    def update_content(self, message_id: int, content: str) -> bool:
        """
        Replace message content and flag the message as edited.

        Args:
            message_id: Message ID
            content: New content

        Returns:
            True if successful, False otherwise
        """
        try:
            self.conn.execute("""
                UPDATE messages SET content = ?, is_edited = TRUE WHERE id = ?
            """, [content, message_id])
            self.conn.commit()
            return True
        except Exception as e:
            self.logger.error(f"Failed to edit message {message_id}: {e}")
            return False
