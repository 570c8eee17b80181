"""Agent personality repository for database operations."""

import json
from datetime import datetime
from typing import Optional, List, Dict, Any
from .base import BaseRepository
from ..database_models.personality import AgentPersonalityDO


_COLUMNS = """
    id, name, description, system_prompt, model, temperature, color, avatar, active,
    archetype, voice_type, speech_pattern, quirks, personality_traits, knowledge_domains,
    specialties, perspective, response_style, temperament, user_id, is_public,
    created_at, updated_at
"""

# Columns that may be changed through update()
_UPDATABLE = (
    "name", "description", "system_prompt", "model", "temperature", "color", "avatar",
    "active", "archetype", "voice_type", "speech_pattern", "quirks", "personality_traits",
    "knowledge_domains", "specialties", "perspective", "response_style", "temperament",
    "is_public",
)

_LIST_COLUMNS = ("quirks", "personality_traits", "knowledge_domains", "specialties")


class AgentPersonalityRepository(BaseRepository):
    """Repository for AgentPersonality CRUD operations."""

    def _to_do(self, row) -> AgentPersonalityDO:
        return AgentPersonalityDO(
            id=row[0],
            name=row[1],
            description=row[2],
            system_prompt=row[3],
            model=row[4],
            temperature=row[5],
            color=row[6],
            avatar=row[7],
            active=bool(row[8]),
            archetype=row[9],
            voice_type=row[10],
            speech_pattern=row[11],
            quirks=self._load_json(row[12], []),
            personality_traits=self._load_json(row[13], []),
            knowledge_domains=self._load_json(row[14], []),
            specialties=self._load_json(row[15], []),
            perspective=row[16],
            response_style=row[17],
            temperament=row[18],
            user_id=row[19],
            is_public=bool(row[20]),
            created_at=row[21],
            updated_at=row[22]
        )

    def create(self, personality: AgentPersonalityDO) -> Optional[int]:
        """
        Create a new agent personality record.

        Args:
            personality: AgentPersonalityDO instance

        Returns:
            New personality ID if successful, None otherwise
        """
        try:
            result = self.conn.execute(f"""
                INSERT INTO agent_personalities ({_COLUMNS})
                VALUES (nextval('agent_personalities_id_seq'), ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?,
                        ?, ?, ?, ?, ?, ?, ?, ?, ?)
                RETURNING id
            """, [
                personality.name,
                personality.description,
                personality.system_prompt,
                personality.model,
                personality.temperature,
                personality.color,
                personality.avatar,
                personality.active,
                personality.archetype,
                personality.voice_type,
                personality.speech_pattern,
                self._dump_list(personality.quirks),
                self._dump_list(personality.personality_traits),
                self._dump_list(personality.knowledge_domains),
                self._dump_list(personality.specialties),
                personality.perspective,
                personality.response_style,
                personality.temperament,
                personality.user_id,
                personality.is_public,
                personality.created_at,
                personality.updated_at
            ]).fetchone()
            self.conn.commit()

            personality.id = result[0] if result else None
            self.logger.info(f"Created agent personality: {personality.id} ({personality.name})")
            return personality.id
        except Exception as e:
            self.logger.error(f"Failed to create agent personality {personality.name}: {e}")
            return None

    def get(self, personality_id: int) -> Optional[AgentPersonalityDO]:
        """
        Get agent personality by ID.

        Args:
            personality_id: Personality ID

        Returns:
            AgentPersonalityDO instance or None
        """
        try:
            result = self.conn.execute(f"""
                SELECT {_COLUMNS}
                FROM agent_personalities
                WHERE id = ?
            """, [personality_id]).fetchone()

            return self._to_do(result) if result else None
        except Exception as e:
            self.logger.error(f"Failed to get agent personality {personality_id}: {e}")
            return None

    def get_many(self, personality_ids: List[int]) -> Dict[int, AgentPersonalityDO]:
        """Get several personalities keyed by ID; unknown IDs are left out."""
        if not personality_ids:
            return {}
        try:
            placeholders = ", ".join("?" for _ in personality_ids)
            results = self.conn.execute(f"""
                SELECT {_COLUMNS}
                FROM agent_personalities
                WHERE id IN ({placeholders})
            """, list(personality_ids)).fetchall()

            return {row[0]: self._to_do(row) for row in results}
        except Exception as e:
            self.logger.error(f"Failed to get agent personalities {personality_ids}: {e}")
            return {}

    def list_all(self) -> List[AgentPersonalityDO]:
        """List all agent personalities ordered by ID."""
        try:
            results = self.conn.execute(f"""
                SELECT {_COLUMNS}
                FROM agent_personalities
                ORDER BY id
            """).fetchall()

            return [self._to_do(row) for row in results]
        except Exception as e:
            self.logger.error(f"Failed to list agent personalities: {e}")
            return []

    def list_visible(self, user_id: int) -> List[AgentPersonalityDO]:
        """
        List personalities a user can see: system, public, and their own.

        Args:
            user_id: Requesting user ID

        Returns:
            List of AgentPersonalityDO instances
        """
        try:
            results = self.conn.execute(f"""
                SELECT {_COLUMNS}
                FROM agent_personalities
                WHERE user_id IS NULL OR is_public = TRUE OR user_id = ?
                ORDER BY id
            """, [user_id]).fetchall()

            return [self._to_do(row) for row in results]
        except Exception as e:
            self.logger.error(f"Failed to list agent personalities for user {user_id}: {e}")
            return []

    def count(self) -> int:
        """Count all personality rows."""
        try:
            result = self.conn.execute("SELECT COUNT(*) FROM agent_personalities").fetchone()
            return result[0] if result else 0
        except Exception as e:
            self.logger.error(f"Failed to count agent personalities: {e}")
            return 0

    def update(self, personality_id: int, updates: Dict[str, Any]) -> bool:
        """
        Update agent personality fields.

        Args:
            personality_id: Personality ID
            updates: Dictionary of fields to update

        Returns:
            True if successful, False otherwise
        """
        try:
            set_clauses = []
            params = []

            for column in _UPDATABLE:
                if column not in updates:
                    continue
                value = updates[column]
                if column in _LIST_COLUMNS:
                    value = json.dumps(list(value or []))
                set_clauses.append(f"{column} = ?")
                params.append(value)

            if not set_clauses:
                return True

            set_clauses.append("updated_at = ?")
            params.append(datetime.utcnow())
            params.append(personality_id)
            query = f"UPDATE agent_personalities SET {', '.join(set_clauses)} WHERE id = ?"

            self.conn.execute(query, params)
            self.conn.commit()
            return True
        except Exception as e:
            self.logger.error(f"Failed to update agent personality {personality_id}: {e}")
            return False

    def delete(self, personality_id: int) -> bool:
        """Delete agent personality by ID."""
        try:
            self.conn.execute("DELETE FROM agent_personalities WHERE id = ?", [personality_id])
            self.conn.commit()
            self.logger.info(f"Deleted agent personality: {personality_id}")
            return True
        except Exception as e:
            self.logger.error(f"Failed to delete agent personality {personality_id}: {e}")
            return False
