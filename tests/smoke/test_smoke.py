"""Smoke tests for quick validation.

Smoke tests are fast, critical-path tests that verify the system's basic functionality.
Run these before commits to catch obvious breakage.

Typical run time: < 30 seconds
"""

from pathlib import Path

import pytest

from cognitiveAgent.graph import PlanModel, StepModel
from cognitiveAgent.session.archive import InMemoryTurnArchive
from cognitiveAgent.session.schema import ProcessState


class TestBasicSetup:
    """Verify settings and package layout."""

    def test_settings_load(self):
        from cognitiveAgent.config.settings import get_settings

        settings = get_settings()
        assert settings is not None
        assert settings.models is not None
        assert settings.governance.max_plan_steps >= 1

    def test_core_directories_exist(self):
        root = Path(__file__).parent.parent.parent
        for dir_path in [
            "cognitiveAgent",
            "cognitiveAgent/session",
            "cognitiveAgent/graph",
            "cognitiveAgent/tools",
            "cognitiveAgent/config",
            "cognitiveAgent/models",
            "tests",
        ]:
            assert (root / dir_path).is_dir(), f"{dir_path} should exist"

    def test_setup_logging_writes_file(self, tmp_path):
        from cognitiveAgent.utils.logging_utils import setup_logging

        logger = setup_logging(logs_dir=tmp_path)
        logger.info("smoke")
        for handler in logger.handlers:
            handler.flush()
        assert list(tmp_path.glob("cognitive_agent_*.log"))
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)


class TestApplication:
    """Verify build_application wires a working session."""

    def test_sessions_are_independent(self, model_resolver):
        from cognitiveAgent.runtime import build_application

        new_session = build_application(model_resolver=model_resolver, archive=InMemoryTurnArchive())
        first, second = new_session(), new_session()

        assert first is not second
        assert first.ledger is not second.ledger
        assert first.archive is second.archive
        assert first.state is ProcessState.IDLE

    @pytest.mark.asyncio
    async def test_round_trip(self, backend, model_resolver):
        from cognitiveAgent.runtime import build_application

        backend.queue(PlanModel, PlanModel(steps=[StepModel(step=1, description="Answer", tool="final_synthesis")]))
        session = build_application(model_resolver=model_resolver, archive=InMemoryTurnArchive())()

        turn_id = await session.submit_query("ping")
        assert await session.execute_plan(turn_id)

        assert session.state is ProcessState.DONE
        assert session.ledger.get(turn_id).text == "The answer is 4."
