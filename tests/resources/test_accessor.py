"""Tests for apirepo.resources.accessor module."""

import asyncio
import gc

import pytest
from conftest import MockSession, Settings, UserInterface, default_handler, settle

from apirepo import SetError
from apirepo.repository import Repository
from apirepo.resources import (
    AnyRepositoryResource,
    ResourceAccessor,
    ResourceField,
    resource,
)
from apirepo.task import TaskStatus


def failing_put_handler(request):
    if request["method"] == "PUT":
        return {"status": 500, "body": None}
    return default_handler(request)


class AccountRepository(Repository):
    profile = resource(lambda api: api.get_profile)
    settings = resource(
        lambda api: api.get_settings,
        get_input=lambda repo: repo.profile.value.id,
        set=lambda api: api.put_settings,
        depends_on=["profile"],
    )


class NamedRepository(AccountRepository):
    name = resource(lambda api: api.get_profile, get_output="name")
    theme = resource(
        lambda api: api.get_settings,
        get_input="42",
        get_output=lambda settings: settings.theme,
    )


@pytest.fixture
def repo(interface, session):
    return AccountRepository(interface, session)


class TestDeclaration:
    """Test suite for class-level resource declarations."""

    def test_fields_become_bound_accessors(self, repo):
        assert isinstance(AccountRepository.profile, ResourceField)
        assert isinstance(repo.profile, ResourceAccessor)
        assert repo.profile.is_bound
        assert repo.profile.repository is repo
        assert repo.profile.name == "profile"
        assert set(repo.resources) == {"profile", "settings"}

    def test_each_repository_gets_its_own_accessors(self, interface, session):
        first = AccountRepository(interface, session)
        second = AccountRepository(interface, session)

        assert first.profile is not second.profile

    def test_accessor_cannot_be_replaced(self, repo):
        with pytest.raises(AttributeError):
            repo.profile = None

    def test_subclass_inherits_declarations(self, interface, session):
        repo = NamedRepository(interface, session)

        assert set(repo.resources) == {"profile", "settings", "name", "theme"}

    @pytest.mark.asyncio
    async def test_output_projection(self, interface, session):
        repo = NamedRepository(interface, session)

        assert await repo.name.fetch() == "Ada"
        assert await repo.theme.fetch() == "dark"


class TestBind:
    """Test suite for ResourceAccessor.bind."""

    def test_bind_same_repository_is_noop(self, repo):
        before = repo.did_change.subscriber_count

        repo.profile.bind(repo)

        assert repo.did_change.subscriber_count == before

    def test_bind_other_repository_raises(self, repo, interface, session):
        other = Repository(interface, session)

        with pytest.raises(RuntimeError):
            repo.profile.bind(other)

    def test_repository_is_held_weakly(self, interface, session):
        repo = AccountRepository(interface, session)
        accessor = repo.profile

        del repo
        gc.collect()

        assert accessor.repository is None
        assert not accessor.is_bound

    @pytest.mark.asyncio
    async def test_fetch_after_repository_is_gone_skips(self, interface, session):
        repo = AccountRepository(interface, session)
        accessor = repo.profile
        del repo
        gc.collect()

        task = accessor.fetch()

        assert task.status is TaskStatus.SKIPPED
        assert session.requests == []

    def test_accessor_changes_reach_repository(self, repo):
        seen = []
        repo.did_change.subscribe(lambda: seen.append(1))

        repo.profile.did_change.send()

        assert seen


class TestDependencyGating:
    """Test suite for dependency-gated refreshes."""

    @pytest.mark.asyncio
    async def test_settings_waits_for_profile(self, repo, session):
        """settings issues exactly one get call once profile resolves."""
        task = repo.settings.fetch()

        assert task.status is TaskStatus.SKIPPED
        assert session.calls_to("/settings") == []

        await repo.profile.fetch()
        await settle()

        assert len(session.calls_to("/settings")) == 1
        assert repo.settings.value == Settings(user_id="42", theme="dark")

    @pytest.mark.asyncio
    async def test_no_further_calls_once_settled(self, repo, session):
        await repo.profile.fetch()
        await settle()

        repo.notify_change()
        await settle()

        assert len(session.calls_to("/me")) == 1
        assert len(session.calls_to("/settings")) == 1

    @pytest.mark.asyncio
    async def test_change_signal_retries_failed_resource(self, repo, session):
        def flaky(request):
            if request["path"] == "/me":
                return {"status": 503, "body": None}
            return default_handler(request)

        session.handler = flaky
        with pytest.raises(Exception):
            await repo.profile.fetch()

        session.handler = default_handler
        repo.notify_change()
        await settle()

        assert repo.profile.value.name == "Ada"


class TestIdentityChange:
    """Test suite for interface identity changes."""

    @pytest.mark.asyncio
    async def test_interface_swap_forces_refetch(self, repo, session):
        await repo.profile.fetch()
        await settle()
        assert repo.profile.needs_get_call is False

        repo.interface = UserInterface()
        await settle()

        assert len(session.calls_to("/me")) == 2
        assert len(session.calls_to("/settings")) == 2

    @pytest.mark.asyncio
    async def test_swap_during_fetch_refetches_after_it_lands(self, repo, session):
        """A value fetched from the old interface is not taken as current."""
        session.gate = asyncio.Event()
        task = repo.profile.fetch()
        await settle()

        repo.interface = UserInterface()
        assert len(session.calls_to("/me")) == 1

        session.gate.set()
        await task
        await settle()

        assert len(session.calls_to("/me")) == 2
        assert repo.profile._last_root_id == repo.interface.id
        assert repo.profile.needs_get_call is False
        assert not repo.profile.is_fetching

    @pytest.mark.asyncio
    async def test_same_identity_does_not_refetch(self, repo, session):
        await repo.profile.fetch()
        await settle()

        repo.interface = UserInterface(id=repo.interface.id)
        await settle()

        assert len(session.calls_to("/me")) == 1


class TestAccessorSet:
    """Test suite for assignments through accessors."""

    @pytest.mark.asyncio
    async def test_failed_set_resyncs_from_server(self, repo, session):
        """After a rollback the accessor refreshes from the get endpoint."""
        await repo.profile.fetch()
        await settle()
        session.handler = failing_put_handler

        with pytest.raises(SetError):
            await repo.settings.set_value(Settings(user_id="42", theme="blue"))
        await settle()

        assert repo.settings.value == Settings(user_id="42", theme="dark")
        assert len(session.calls_to("/settings")) == 3

    @pytest.mark.asyncio
    async def test_set_dependency_gates_on_sibling(self, interface):
        class GuardedRepository(AccountRepository):
            guarded = resource(
                lambda api: api.get_settings,
                get_input="42",
                set=lambda api: api.put_settings,
                set_depends_on=["profile"],
            )

        session = MockSession(default_handler)
        repo = GuardedRepository(interface, session)

        with pytest.raises(SetError):
            await repo.guarded.set_value(Settings(user_id="42"))

        await repo.profile.fetch()
        await settle()
        saved = await repo.guarded.set_value(Settings(user_id="42", theme="blue"))
        assert saved.theme == "blue"


class TestProjection:
    def test_projected_is_type_erased(self, repo):
        projected = repo.profile.projected

        assert isinstance(projected, AnyRepositoryResource)
        assert projected.base is repo.profile
        assert projected.repository is repo
