from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from telegram.ext import ConversationHandler

from shoptree.config import Config
from shoptree.constants import WAITING_MOVED_CATEGORY, WAITING_TARGET_CATEGORY, WAITING_DROP_POSITION
from shoptree.handlers import CategoryOrganizerHandler, build_organizer_conversation
from tests.conftest import make_category

ADMIN_ID = 1001


def callback_update(data, user_id=ADMIN_ID):
    query = SimpleNamespace(data=data, answer=AsyncMock(), edit_message_text=AsyncMock())
    return SimpleNamespace(
        callback_query=query,
        effective_user=SimpleNamespace(id=user_id),
        message=None,
    )


@pytest.fixture()
def handler(controller, monkeypatch):
    monkeypatch.setattr(Config, "ADMIN_IDS", [ADMIN_ID])
    return CategoryOrganizerHandler(controller)


@pytest.fixture()
def context():
    return SimpleNamespace(user_data={})


async def run_gesture(handler, context, moved_id, target_id, position):
    assert await handler.start_organize(callback_update("organize_categories"), context) == WAITING_MOVED_CATEGORY
    assert await handler.handle_moved_selection(callback_update(f"org_pick_{moved_id}"), context) == WAITING_TARGET_CATEGORY
    assert await handler.handle_target_selection(callback_update(f"org_target_{target_id}"), context) == WAITING_DROP_POSITION
    update = callback_update(f"org_drop_{position}")
    state = await handler.handle_drop_position(update, context)
    return state, update.callback_query.edit_message_text.call_args.args[0]


@pytest.mark.asyncio
async def test_full_conversation_moves_category(handler, context, store):
    state, text = await run_gesture(handler, context, 4, 2, "above")

    assert state == ConversationHandler.END
    assert text.startswith("✅")
    assert store.keys() == [1, 4, 2, 3]
    assert context.user_data == {}


@pytest.mark.asyncio
async def test_cycle_is_reported_to_admin(handler, context, store):
    store.rows[5] = make_category(5, 10, parent_id=4)

    state, text = await run_gesture(handler, context, 3, 5, "inside")

    assert state == ConversationHandler.END
    assert text.startswith("⛔️")
    assert store.patch_calls == []


@pytest.mark.asyncio
async def test_persist_failure_is_reported_to_admin(handler, context, store):
    store.fail_writes = True

    state, text = await run_gesture(handler, context, 4, 2, "below")

    assert state == ConversationHandler.END
    assert text.startswith("❌")


@pytest.mark.asyncio
async def test_non_admin_is_refused(handler, context, store):
    update = callback_update("organize_categories", user_id=7)

    state = await handler.start_organize(update, context)

    assert state == ConversationHandler.END
    assert store.load_calls == 0


@pytest.mark.asyncio
async def test_cancel_resets_drag(handler, context, controller):
    await handler.start_organize(callback_update("organize_categories"), context)
    await handler.handle_moved_selection(callback_update("org_pick_4"), context)

    state = await handler.cancel_organize(callback_update("org_cancel"), context)

    assert state == ConversationHandler.END
    assert controller.state.value == "idle"
    assert "organize_moved_id" not in context.user_data


def test_conversation_definition(handler):
    conversation = build_organizer_conversation(handler)

    assert set(conversation.states) == {
        WAITING_MOVED_CATEGORY, WAITING_TARGET_CATEGORY, WAITING_DROP_POSITION,
        ConversationHandler.TIMEOUT,
    }
    assert conversation.conversation_timeout == Config.CONVERSATION_TIMEOUT


@pytest.mark.asyncio
async def test_new_conversation_drops_abandoned_drag(handler, context, controller):
    await controller.refresh()
    controller.begin_drag(4)

    state = await handler.start_organize(callback_update("organize_categories"), context)

    assert state == WAITING_MOVED_CATEGORY
    assert controller.state.value == "idle"


@pytest.mark.asyncio
async def test_timeout_resets_drag(handler, context, controller):
    await handler.start_organize(callback_update("organize_categories"), context)
    await handler.handle_moved_selection(callback_update("org_pick_4"), context)

    state = await handler.handle_timeout(callback_update("org_pick_4"), context)

    assert state == ConversationHandler.END
    assert controller.state.value == "idle"
    assert context.user_data == {}
