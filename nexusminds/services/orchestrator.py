"""Conversation orchestrator - drives agents through turns in the background."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from ..db import (
    DatabaseConnection,
    AgentPersonalityRepository,
    ConversationRepository,
    MessageRepository
)
from ..db.database_models import AgentPersonalityDO, MessageDO, MessageType
from ..utils.logger import get_app_logger
from .broadcaster import Broadcaster, EventType
from .completion import CompletionError, CompletionService, CompletionTimeoutError
from .conversations import end_conversation, serialize_message
from .prompt_builder import build_prompt


class RunStatus(str, Enum):
    """Lifecycle of one orchestration run."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    STOPPED = "stopped"
    FAILED = "failed"
    ABORTED = "aborted"


TERMINAL_STATUSES = {RunStatus.COMPLETED, RunStatus.STOPPED, RunStatus.FAILED, RunStatus.ABORTED}


@dataclass
class OrchestrationRun:
    """One execution of the turn x agent loop for a conversation."""

    conversation_id: int
    agent_ids: List[int]
    turn_count: int
    status: RunStatus = RunStatus.PENDING
    turns_completed: int = 0
    messages_created: int = 0
    error: Optional[str] = None
    started_at: datetime = field(default_factory=datetime.utcnow)
    finished_at: Optional[datetime] = None
    task: Optional[asyncio.Task] = field(default=None, repr=False)

    @property
    def is_finished(self) -> bool:
        return self.status in TERMINAL_STATUSES


class Orchestrator:
    """Runs multi-agent conversations as supervised background tasks."""

    def __init__(
        self,
        db_conn: DatabaseConnection,
        completion_service: CompletionService,
        broadcaster: Broadcaster,
        turn_delay: float = 1.5,
        max_tokens: Optional[int] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            db_conn: Database connection
            completion_service: Completion client
            broadcaster: Event broadcaster for NEW_MESSAGE / END_CONVERSATION
            turn_delay: Pause after each agent reply in seconds
            max_tokens: Max tokens per reply (service default when None)
        """
        self.db_conn = db_conn
        self.completion_service = completion_service
        self.broadcaster = broadcaster
        self.turn_delay = turn_delay
        self.max_tokens = max_tokens
        self.logger = get_app_logger("orchestrator")

        # Latest run per conversation {conversation_id: OrchestrationRun}
        self.runs: Dict[int, OrchestrationRun] = {}

    # === Run management ===

    def get_run(self, conversation_id: int) -> Optional[OrchestrationRun]:
        return self.runs.get(conversation_id)

    def is_running(self, conversation_id: int) -> bool:
        run = self.runs.get(conversation_id)
        return run is not None and not run.is_finished

    def start(
        self,
        conversation_id: int,
        topic: str,
        agent_ids: List[int],
        turn_count: int
    ) -> OrchestrationRun:
        """
        Spawn a background run and return immediately.

        Args:
            conversation_id: Conversation ID
            topic: Conversation topic
            agent_ids: Participating agents in turn order
            turn_count: Number of turns

        Returns:
            The pending run; its task resolves when the run finishes

        Raises:
            ValueError: Fewer than two agents, non-positive turns, or a run already in progress
        """
        if len(agent_ids) < 2:
            raise ValueError("At least two agents are required")
        if turn_count < 1:
            raise ValueError("turn_count must be positive")
        if self.is_running(conversation_id):
            raise ValueError(f"Conversation {conversation_id} is already being orchestrated")

        run = OrchestrationRun(
            conversation_id=conversation_id,
            agent_ids=list(agent_ids),
            turn_count=turn_count
        )
        self.runs[conversation_id] = run
        run.task = asyncio.create_task(
            self._supervise(run, topic),
            name=f"orchestration-{conversation_id}"
        )

        self.logger.info(
            f"Orchestration started for conversation {conversation_id}: "
            f"agents={run.agent_ids}, turns={turn_count}"
        )
        return run

    async def wait(self, conversation_id: int, timeout: Optional[float] = None) -> Optional[OrchestrationRun]:
        """Wait for the latest run of a conversation to finish."""
        run = self.runs.get(conversation_id)
        if run is None or run.task is None:
            return run
        await asyncio.wait({run.task}, timeout=timeout)
        return run

    async def shutdown(self):
        """Cancel unfinished runs."""
        tasks = [
            run.task for run in self.runs.values()
            if run.task is not None and not run.task.done()
        ]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            self.logger.info(f"Cancelled {len(tasks)} orchestration runs")

    async def _supervise(self, run: OrchestrationRun, topic: str):
        try:
            await self.run(run, topic)
        except asyncio.CancelledError:
            run.status = RunStatus.ABORTED
            run.error = "cancelled"
            raise
        except Exception as e:
            self.logger.exception(f"Orchestration for conversation {run.conversation_id} crashed: {e}")
            run.status = RunStatus.FAILED
            run.error = str(e)
        finally:
            run.finished_at = datetime.utcnow()
            self.logger.info(
                f"Orchestration for conversation {run.conversation_id} finished: "
                f"{run.status.value} ({run.messages_created} messages, {run.turns_completed} turns)"
            )

    # === Orchestration loop ===

    def _is_live(self, conversation_id: int) -> bool:
        conversation = ConversationRepository(self.db_conn.conn).get(conversation_id)
        return conversation is not None and conversation.is_active

    async def run(self, run: OrchestrationRun, topic: str):
        """
        Drive every agent through every turn, strictly in sequence.

        Stops early when the conversation is ended from outside; the turn loop
        only notices this between agent calls.
        """
        run.status = RunStatus.RUNNING
        conversation_id = run.conversation_id

        conversation = ConversationRepository(self.db_conn.conn).get(conversation_id)
        if conversation is None or not conversation.is_active:
            self.logger.warning(f"Conversation {conversation_id} missing or inactive, aborting run")
            run.status = RunStatus.ABORTED
            return

        found = AgentPersonalityRepository(self.db_conn.conn).get_many(run.agent_ids)
        agents = [found[agent_id] for agent_id in run.agent_ids if agent_id in found]
        if len(agents) < 2:
            self.logger.warning(
                f"Only {len(agents)} of {len(run.agent_ids)} agents resolved for "
                f"conversation {conversation_id}, aborting run"
            )
            run.status = RunStatus.ABORTED
            return

        for turn in range(run.turn_count):
            if not self._is_live(conversation_id):
                run.status = RunStatus.STOPPED
                return

            for agent in agents:
                try:
                    await self.generate_reply(conversation_id, topic, agent, turn_number=turn + 1)
                except CompletionError as e:
                    self.logger.error(
                        f"Agent {agent.name} failed in conversation {conversation_id} "
                        f"turn {turn + 1}: {e}"
                    )
                    await self._record_failure(conversation_id, agent, e, turn + 1)
                    run.status = RunStatus.FAILED
                    run.error = str(e)
                    return

                run.messages_created += 1
                await asyncio.sleep(self.turn_delay)

                if not self._is_live(conversation_id):
                    self.logger.info(f"Conversation {conversation_id} ended mid-turn, stopping run")
                    run.status = RunStatus.STOPPED
                    return

            ConversationRepository(self.db_conn.conn).increment_turn(conversation_id)
            run.turns_completed += 1

        await end_conversation(self.db_conn, self.broadcaster, conversation_id)
        run.status = RunStatus.COMPLETED

    async def generate_reply(
        self,
        conversation_id: int,
        topic: str,
        persona: AgentPersonalityDO,
        turn_number: Optional[int] = None
    ) -> MessageDO:
        """
        Produce, persist and broadcast one agent reply.

        Args:
            conversation_id: Conversation ID
            topic: Conversation topic
            persona: Replying agent
            turn_number: Turn the reply belongs to (None for one-shot replies)

        Returns:
            The persisted message

        Raises:
            CompletionError: The completion failed after the model fallback
            RuntimeError: The message could not be stored
        """
        message_repo = MessageRepository(self.db_conn.conn)
        history = message_repo.get_by_conversation(conversation_id)

        speakers = AgentPersonalityRepository(self.db_conn.conn).get_many(
            sorted({m.agent_personality_id for m in history})
        )
        prior_turns = [
            (speakers[m.agent_personality_id].name if m.agent_personality_id in speakers else "Unknown agent", m.content)
            for m in history
            if m.message_type != MessageType.ERROR.value
        ]

        prompt = build_prompt(persona, topic, prior_turns)
        temperature = persona.temperature_value()

        result = await self.completion_service.complete_with_fallback(
            system_prompt=persona.system_prompt,
            user_prompt=prompt,
            model=persona.model,
            temperature=temperature,
            max_tokens=self.max_tokens
        )

        metadata = {
            "model": result.model,
            "turn_number": turn_number,
            "prompt_tokens": result.usage.get("prompt_tokens"),
            "completion_tokens": result.usage.get("completion_tokens"),
            "total_tokens": result.total_tokens,
        }
        if result.fallback_from:
            metadata["requested_model"] = result.fallback_from

        message = MessageDO(
            conversation_id=conversation_id,
            agent_personality_id=persona.id,
            content=result.text,
            message_type=MessageType.RESPONSE.value,
            token_count=result.total_tokens,
            process_time=result.process_time_ms,
            model=result.model,
            temperature=str(temperature),
            metadata=metadata
        )
        if message_repo.add(message) is None:
            raise RuntimeError(f"Failed to store reply from {persona.name} in conversation {conversation_id}")

        ConversationRepository(self.db_conn.conn).update(conversation_id, {"last_activity": datetime.utcnow()})

        await self.broadcaster.broadcast(EventType.NEW_MESSAGE, serialize_message(message, persona))
        return message

    async def _record_failure(
        self,
        conversation_id: int,
        persona: AgentPersonalityDO,
        error: CompletionError,
        turn_number: int
    ):
        # Terminal error message so clients see why the run stopped
        reason = "timed out" if isinstance(error, CompletionTimeoutError) else "hit a model error"
        message = MessageDO(
            conversation_id=conversation_id,
            agent_personality_id=persona.id,
            content=f"{persona.name} {reason} and could not respond.",
            message_type=MessageType.ERROR.value,
            model=persona.model,
            temperature=persona.temperature,
            metadata={
                "turn_number": turn_number,
                "error_type": type(error).__name__,
                "detail": str(error),
            }
        )
        if MessageRepository(self.db_conn.conn).add(message) is not None:
            await self.broadcaster.broadcast(EventType.NEW_MESSAGE, serialize_message(message, persona))