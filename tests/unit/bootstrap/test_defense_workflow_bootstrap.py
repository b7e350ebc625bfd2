"""Unit tests for the defense workflow composition root."""

import os
from collections.abc import Iterator
from unittest.mock import patch

import pytest
import structlog

from src.application.services import MeetingService, ThesisFormService
from src.bootstrap import defense_workflow
from src.bootstrap.logging import configure_structlog
from src.config.defense_config import TEST_DEFENSE_WORKFLOW_CONFIG
from src.infrastructure.adapters import SystemTimeAuthority
from src.infrastructure.stubs import MeetingRepositoryStub, ThesisFormRepositoryStub
from tests.helpers.fake_time_authority import FakeTimeAuthority


@pytest.fixture(autouse=True)
def reset_wiring() -> Iterator[None]:
    defense_workflow.reset_defense_workflow_dependencies()
    yield
    defense_workflow.reset_defense_workflow_dependencies()


class TestDefaults:
    def test_default_collaborators_are_singletons(self) -> None:
        assert isinstance(defense_workflow.get_form_repository(), ThesisFormRepositoryStub)
        assert defense_workflow.get_form_repository() is defense_workflow.get_form_repository()
        assert isinstance(defense_workflow.get_meeting_repository(), MeetingRepositoryStub)
        assert isinstance(defense_workflow.get_time_authority(), SystemTimeAuthority)

    def test_config_read_from_environment(self) -> None:
        with patch.dict(os.environ, {"DEFENSE_MIN_JURY_COUNT": "5"}):
            config = defense_workflow.get_config()
        assert config.jury.min_jury_count == 5

    def test_services_share_the_meeting_repository(self) -> None:
        form_service = defense_workflow.get_thesis_form_service()
        meeting_service = defense_workflow.get_meeting_service()
        assert isinstance(form_service, ThesisFormService)
        assert isinstance(meeting_service, MeetingService)
        assert form_service._meetings is meeting_service._meetings


class TestOverrides:
    def test_set_collaborators(self) -> None:
        clock = FakeTimeAuthority()
        repo = ThesisFormRepositoryStub()
        defense_workflow.set_time_authority(clock)
        defense_workflow.set_form_repository(repo)
        defense_workflow.set_config(TEST_DEFENSE_WORKFLOW_CONFIG)

        service = defense_workflow.get_thesis_form_service()

        assert service._time is clock
        assert service._forms is repo
        assert service._config is TEST_DEFENSE_WORKFLOW_CONFIG

    def test_reset_drops_overrides(self) -> None:
        defense_workflow.set_time_authority(FakeTimeAuthority())
        defense_workflow.reset_defense_workflow_dependencies()
        assert isinstance(defense_workflow.get_time_authority(), SystemTimeAuthority)


class TestLoggingBootstrap:
    def test_environment_variable_selects_console(self) -> None:
        with patch.dict(os.environ, {"DEFENSE_ENVIRONMENT": "development"}):
            configure_structlog()
        try:
            processors = structlog.get_config()["processors"]
            assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
        finally:
            structlog.reset_defaults()
