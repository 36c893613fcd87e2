"""Tests for optimistic follow/unfollow, commit and rollback.

Each test drives the controller the way a UI does: connect, look up an
address, toggle. Assertions look at the observable view, the live search
result and the notifications.
"""
from __future__ import annotations

import asyncio

import pytest

from cybergraph.errors import MutationError
from cybergraph.mutation import MutationState
from cybergraph.notifications import NotificationKind
from tests.helpers.fake_services import OTHER_USER, USER, ident, letters_of, make_result, make_view

ADDR_C = ident("c").address
ADDR_D = ident("d").address


@pytest.fixture
def ready(controller, fake_query):
    """Signed in with followings [a, b, c] (count 3); d is not followed, c is."""
    fake_query.set_view(USER, make_view("abc", "e", following_cursor="c3"))
    fake_query.set_result(make_result("d", False))
    fake_query.set_result(make_result("c", True))
    asyncio.run(controller.connect_wallet(USER))
    return controller


# ==============================================================================
# Commit
# ==============================================================================

@pytest.mark.unit
def test_follow_success_appends_and_counts(ready, mutator):
    asyncio.run(ready.resolve(ADDR_D))

    outcome = asyncio.run(ready.toggle_follow(ADDR_D))

    assert outcome.state is MutationState.COMMITTED
    assert outcome.intent == "follow"
    assert mutator.calls == [("follow", ADDR_D)]
    assert ready.view.following_count == 4
    assert letters_of(ready.view.followings) == "abcd"
    assert ready.search_result.is_following is True
    assert ready.notifier.latest.message == "Follow Success!"
    assert ready.notifier.latest.kind is NotificationKind.SUCCESS
    assert ready.follow_in_progress is False


@pytest.mark.unit
def test_unfollow_success_removes_and_counts(ready, mutator):
    asyncio.run(ready.resolve(ADDR_C))

    outcome = asyncio.run(ready.toggle_follow())

    assert outcome.ok
    assert mutator.calls == [("unfollow", ADDR_C)]
    assert ready.view.following_count == 2
    assert letters_of(ready.view.followings) == "ab"
    assert ready.search_result.is_following is False
    assert ready.notifier.latest.message == "Unfollow Success!"


@pytest.mark.unit
def test_follow_then_unfollow_round_trip_counts(ready):
    asyncio.run(ready.resolve(ADDR_D))

    asyncio.run(ready.toggle_follow())
    asyncio.run(ready.toggle_follow())

    assert ready.view.following_count == 3
    assert letters_of(ready.view.followings) == "abc"
    assert ready.search_result.is_following is False


@pytest.mark.unit
def test_optimistic_state_is_consistent_while_pending(ready, mutator):
    asyncio.run(ready.resolve(ADDR_D))
    mutator.on_call = lambda: (
        ready.search_result.is_following,
        ADDR_D in ready.view.followings,
        ready.view.following_count,
        ready.follow_in_progress,
    )

    asyncio.run(ready.toggle_follow())

    assert mutator.observed == [(True, True, 4, True)]


# ==============================================================================
# Rollback
# ==============================================================================

@pytest.mark.unit
def test_follow_failure_rolls_back(ready, mutator):
    asyncio.run(ready.resolve(ADDR_D))
    view_before = ready.view
    mutator.error = RuntimeError("user rejected signature")

    outcome = asyncio.run(ready.toggle_follow())

    assert outcome.state is MutationState.FAILED
    assert isinstance(outcome.error, MutationError)
    assert "user rejected signature" in str(outcome.error)
    assert ready.view == view_before
    assert ready.view.following_count == 3
    assert letters_of(ready.view.followings) == "abc"
    assert ready.search_result.is_following is False
    assert ready.notifier.latest.kind is NotificationKind.ERROR
    assert ready.follow_in_progress is False


@pytest.mark.unit
def test_unfollow_failure_restores_position(ready, mutator):
    asyncio.run(ready.resolve(ADDR_C))
    view_before = ready.view
    mutator.error = MutationError("unfollow", ADDR_C, RuntimeError("network down"))

    outcome = asyncio.run(ready.toggle_follow())

    assert outcome.state is MutationState.FAILED
    assert outcome.error is mutator.error
    assert ready.view == view_before
    assert ready.search_result.is_following is True
    assert ready.notifier.latest.message == "Unfollow Failed!"


@pytest.mark.unit
def test_failure_keeps_pages_loaded_while_pending(ready, fake_query, mutator):
    fake_query.set_page(USER, "followings", "c3", "ef", None)
    asyncio.run(ready.resolve(ADDR_D))
    mutator.error = RuntimeError("rejected")

    async def scenario():
        mutator.gate = asyncio.Event()
        task = asyncio.create_task(ready.toggle_follow())
        await asyncio.sleep(0)
        await ready.load_more("followings")
        mutator.gate.set()
        return await task

    outcome = asyncio.run(scenario())

    assert outcome.state is MutationState.FAILED
    assert letters_of(ready.view.followings) == "abcef"
    assert ready.view.following_count == 3


@pytest.mark.unit
def test_cancelled_mutation_rolls_back_and_clears_pending(ready, mutator):
    asyncio.run(ready.resolve(ADDR_D))
    view_before = ready.view

    async def scenario():
        mutator.gate = asyncio.Event()
        task = asyncio.create_task(ready.toggle_follow())
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())

    assert ready.view == view_before
    assert ready.search_result.is_following is False
    assert ready.follow_in_progress is False


# ==============================================================================
# Guards
# ==============================================================================

@pytest.mark.unit
def test_second_toggle_while_pending_is_rejected(ready, mutator):
    asyncio.run(ready.resolve(ADDR_D))

    async def scenario():
        mutator.gate = asyncio.Event()
        first = asyncio.create_task(ready.toggle_follow())
        await asyncio.sleep(0)
        assert ready.engine.state_for(ADDR_D) is MutationState.PENDING
        second = await ready.toggle_follow()
        mutator.gate.set()
        return await first, second

    first, second = asyncio.run(scenario())

    assert first.state is MutationState.COMMITTED
    assert second.state is MutationState.REJECTED
    assert second.reason == "mutation already pending"
    assert mutator.calls == [("follow", ADDR_D)]
    assert ready.view.following_count == 4
    assert ready.engine.state_for(ADDR_D) is MutationState.IDLE


@pytest.mark.unit
def test_toggle_without_live_result_is_rejected(ready, mutator):
    outcome = asyncio.run(ready.toggle_follow())

    assert outcome.state is MutationState.REJECTED
    assert mutator.calls == []
    assert ready.notifier.latest is None


@pytest.mark.unit
def test_toggle_for_other_target_is_rejected(ready, mutator):
    asyncio.run(ready.resolve(ADDR_D))

    outcome = asyncio.run(ready.toggle_follow(ADDR_C))

    assert outcome.state is MutationState.REJECTED
    assert mutator.calls == []


@pytest.mark.unit
def test_failure_after_session_switch_leaves_new_session_alone(ready, fake_query, mutator):
    fake_query.set_view(OTHER_USER, make_view("ef"))
    asyncio.run(ready.resolve(ADDR_D))
    mutator.error = RuntimeError("rejected")

    async def scenario():
        mutator.gate = asyncio.Event()
        task = asyncio.create_task(ready.toggle_follow())
        await asyncio.sleep(0)
        await ready.connect_wallet(OTHER_USER)
        mutator.gate.set()
        return await task

    outcome = asyncio.run(scenario())

    assert outcome.state is MutationState.FAILED
    assert letters_of(ready.view.followings) == "ef"
    assert ready.view.following_count == 2
    assert ready.search_result is None


# ==============================================================================
# Result and list agree after commit
# ==============================================================================

def _agrees(controller, address):
    return (address in controller.view.followings) == controller.search_result.is_following


@pytest.mark.unit
def test_lookup_repeated_while_pending_agrees_after_commit(ready, mutator):
    asyncio.run(ready.resolve(ADDR_D))

    async def scenario():
        mutator.gate = asyncio.Event()
        task = asyncio.create_task(ready.toggle_follow())
        await asyncio.sleep(0)
        # The service still reports the pre-follow status.
        await ready.resolve(ADDR_D)
        mutator.gate.set()
        return await task

    outcome = asyncio.run(scenario())

    assert outcome.state is MutationState.COMMITTED
    assert ready.search_result.is_following is True
    assert letters_of(ready.view.followings) == "abcd"
    assert ready.view.following_count == 4
    assert _agrees(ready, ADDR_D)


@pytest.mark.unit
def test_reload_while_follow_pending_shows_follow_after_commit(ready, mutator):
    asyncio.run(ready.resolve(ADDR_D))

    async def scenario():
        mutator.gate = asyncio.Event()
        task = asyncio.create_task(ready.toggle_follow())
        await asyncio.sleep(0)
        await ready.initialize()
        assert letters_of(ready.view.followings) == "abc"
        mutator.gate.set()
        return await task

    outcome = asyncio.run(scenario())

    assert outcome.state is MutationState.COMMITTED
    assert letters_of(ready.view.followings) == "abcd"
    assert ready.view.following_count == 4
    assert _agrees(ready, ADDR_D)


@pytest.mark.unit
def test_reload_while_unfollow_pending_drops_identity_after_commit(ready, mutator):
    asyncio.run(ready.resolve(ADDR_C))

    async def scenario():
        mutator.gate = asyncio.Event()
        task = asyncio.create_task(ready.toggle_follow())
        await asyncio.sleep(0)
        await ready.initialize()
        mutator.gate.set()
        return await task

    outcome = asyncio.run(scenario())

    assert outcome.state is MutationState.COMMITTED
    assert letters_of(ready.view.followings) == "ab"
    assert ready.view.following_count == 2
    assert _agrees(ready, ADDR_C)


@pytest.mark.unit
def test_reload_while_follow_pending_then_failure_keeps_reloaded_view(ready, mutator):
    asyncio.run(ready.resolve(ADDR_D))
    mutator.error = RuntimeError("rejected")

    async def scenario():
        mutator.gate = asyncio.Event()
        task = asyncio.create_task(ready.toggle_follow())
        await asyncio.sleep(0)
        await ready.initialize()
        mutator.gate.set()
        return await task

    outcome = asyncio.run(scenario())

    assert outcome.state is MutationState.FAILED
    assert letters_of(ready.view.followings) == "abc"
    assert ready.view.following_count == 3
    assert _agrees(ready, ADDR_D)
