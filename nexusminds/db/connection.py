"""DuckDB connection and schema for NexusMinds."""

import duckdb
from pathlib import Path
from typing import Dict, Optional
from ..utils.logger import get_app_logger


IN_MEMORY = ":memory:"

# No foreign keys; the repositories check references.
TABLES: Dict[str, str] = {
    "users": """
        id BIGINT PRIMARY KEY,
        username VARCHAR NOT NULL UNIQUE,
        created_at TIMESTAMP NOT NULL
    """,
    # user_id NULL marks a system personality
    "agent_personalities": """
        id BIGINT PRIMARY KEY,
        name VARCHAR NOT NULL,
        description VARCHAR NOT NULL,
        system_prompt VARCHAR NOT NULL,
        model VARCHAR NOT NULL,
        temperature VARCHAR DEFAULT '0.7',
        color VARCHAR NOT NULL,
        avatar VARCHAR,
        active BOOLEAN DEFAULT TRUE,
        archetype VARCHAR,
        voice_type VARCHAR DEFAULT 'neutral',
        speech_pattern VARCHAR,
        quirks JSON,
        personality_traits JSON,
        knowledge_domains JSON,
        specialties JSON,
        perspective VARCHAR,
        response_style VARCHAR DEFAULT 'balanced',
        temperament VARCHAR,
        user_id BIGINT,
        is_public BOOLEAN DEFAULT FALSE,
        created_at TIMESTAMP NOT NULL,
        updated_at TIMESTAMP NOT NULL
    """,
    "conversations": """
        id BIGINT PRIMARY KEY,
        topic VARCHAR NOT NULL,
        session_id VARCHAR NOT NULL,
        status VARCHAR NOT NULL DEFAULT 'active',
        current_turn INTEGER NOT NULL DEFAULT 0,
        max_turns INTEGER,
        is_active BOOLEAN NOT NULL DEFAULT TRUE,
        started_at TIMESTAMP NOT NULL,
        ended_at TIMESTAMP,
        last_activity TIMESTAMP NOT NULL,
        user_id BIGINT
    """,
    "messages": """
        id BIGINT PRIMARY KEY,
        conversation_id BIGINT NOT NULL,
        agent_personality_id BIGINT NOT NULL,
        content VARCHAR NOT NULL,
        message_type VARCHAR NOT NULL DEFAULT 'standard',
        token_count INTEGER,
        process_time INTEGER,
        model VARCHAR,
        temperature VARCHAR,
        metadata JSON,
        is_edited BOOLEAN DEFAULT FALSE,
        timestamp TIMESTAMP NOT NULL
    """,
}

INDEXES = {
    "idx_personalities_user": "agent_personalities(user_id)",
    "idx_conversations_user": "conversations(user_id)",
    "idx_conversations_session": "conversations(session_id)",
    "idx_messages_conversation": "messages(conversation_id, timestamp)",
    "idx_messages_personality": "messages(agent_personality_id)",
}


def sequence_name(table: str) -> str:
    """ID sequence backing a table."""
    return f"{table}_id_seq"


class DatabaseConnection:
    """Owns the single DuckDB connection shared by all repositories."""

    def __init__(self, db_path: str = "./data/nexusminds.db"):
        """
        Open (creating if needed) the database and ensure the schema exists.

        Args:
            db_path: DuckDB file path, or ":memory:"
        """
        self.db_path = db_path
        self.logger = get_app_logger()
        self.conn: Optional[duckdb.DuckDBPyConnection] = None

        if db_path != IN_MEMORY:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        try:
            self.conn = duckdb.connect(db_path)
        except Exception as e:
            self.logger.error(f"Failed to open DuckDB at {db_path}: {e}")
            raise
        self.logger.info(f"Connected to DuckDB at {db_path}")

        self._create_schema()

    def _create_schema(self):
        try:
            for table, columns in TABLES.items():
                self.conn.execute(f"CREATE TABLE IF NOT EXISTS {table} ({columns})")
                self.conn.execute(f"CREATE SEQUENCE IF NOT EXISTS {sequence_name(table)} START 1")
            for index, target in INDEXES.items():
                self.conn.execute(f"CREATE INDEX IF NOT EXISTS {index} ON {target}")
        except Exception as e:
            self.logger.error(f"Failed to create schema in {self.db_path}: {e}")
            raise

        self.logger.info(f"Schema ready: {', '.join(TABLES)}")

    @property
    def is_open(self) -> bool:
        return self.conn is not None

    def close(self):
        """Close the connection; safe to call twice."""
        if self.conn is None:
            return
        self.conn.close()
        self.conn = None
        self.logger.info("Database connection closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
