"""Tests for AgentPersonalityRepository."""

import pytest

from nexusminds.db.repositories.personality import AgentPersonalityRepository
from nexusminds.db.database_models.personality import AgentPersonalityDO


@pytest.fixture
def repo(db_conn):
    """Provide an AgentPersonalityRepository."""
    return AgentPersonalityRepository(db_conn.conn)


def _make_persona(**overrides):
    """Factory for AgentPersonalityDO with sensible defaults."""
    defaults = dict(
        name="SAGE",
        description="Wise old thinker",
        system_prompt="You are SAGE, patient and wise.",
        model="llama3-8b-8192",
        color="#ABCDEF"
    )
    defaults.update(overrides)
    return AgentPersonalityDO(**defaults)


class TestAgentPersonalityRepository:
    """Tests for AgentPersonalityRepository."""

    class TestCreate:
        """SUT: AgentPersonalityRepository.create"""

        def test_list_fields_round_trip(self, repo):
            """JSON list columns should come back as lists."""
            persona = _make_persona(
                quirks=["quotes proverbs"],
                personality_traits=["calm", "wise"],
                knowledge_domains=["history"],
                specialties=["ethics"]
            )
            repo.create(persona)

            result = repo.get(persona.id)
            assert result.quirks == ["quotes proverbs"]
            assert result.personality_traits == ["calm", "wise"]
            assert result.knowledge_domains == ["history"]
            assert result.specialties == ["ethics"]

        def test_defaults(self, repo):
            """Unset optional fields should keep their defaults."""
            persona = _make_persona()
            repo.create(persona)

            result = repo.get(persona.id)
            assert result.temperature == "0.7"
            assert result.response_style == "balanced"
            assert result.active is True
            assert result.is_system is True

    class TestGetMany:
        """SUT: AgentPersonalityRepository.get_many"""

        def test_skips_unknown(self, repo):
            a = _make_persona(name="A1")
            b = _make_persona(name="B1")
            repo.create(a)
            repo.create(b)

            result = repo.get_many([b.id, 99, a.id])
            assert set(result) == {a.id, b.id}
            assert result[b.id].name == "B1"

        def test_empty(self, repo):
            assert repo.get_many([]) == {}

    class TestListVisible:
        """SUT: AgentPersonalityRepository.list_visible"""

        def test_system_public_and_own(self, repo):
            """Private personalities of other users should be hidden."""
            repo.create(_make_persona(name="SYSTEM"))
            repo.create(_make_persona(name="MINE", user_id=1))
            repo.create(_make_persona(name="SHARED", user_id=2, is_public=True))
            repo.create(_make_persona(name="HIDDEN", user_id=2))

            names = [p.name for p in repo.list_visible(1)]
            assert names == ["SYSTEM", "MINE", "SHARED"]

    class TestUpdate:
        """SUT: AgentPersonalityRepository.update"""

        def test_updates_fields(self, repo):
            persona = _make_persona(user_id=1)
            repo.create(persona)

            assert repo.update(persona.id, {"name": "NEWNAME", "quirks": ["hums"], "temperature": "0.2"})

            result = repo.get(persona.id)
            assert result.name == "NEWNAME"
            assert result.quirks == ["hums"]
            assert result.temperature == "0.2"
            assert result.updated_at >= persona.updated_at

        def test_ignores_unknown_columns(self, repo):
            """Columns outside the updatable set should be ignored."""
            persona = _make_persona(user_id=1)
            repo.create(persona)

            assert repo.update(persona.id, {"user_id": 2, "id": 50})
            result = repo.get(persona.id)
            assert result.user_id == 1

    class TestDelete:
        """SUT: AgentPersonalityRepository.delete / count"""

        def test_delete(self, repo):
            persona = _make_persona()
            repo.create(persona)
            assert repo.count() == 1

            assert repo.delete(persona.id) is True
            assert repo.get(persona.id) is None
            assert repo.count() == 0
