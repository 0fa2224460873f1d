"""Tests for the toggle state service.

Runs the registry against an in-memory SQLite store and a recording bus:
- create-or-get idempotence and the insert race
- replacement (id checks, rebinding, notification of the stored record)
- deletion, lookups by key and service start announcements
"""

from unittest.mock import patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from toggler import crud, schemas
from toggler.core.exceptions import (
    DuplicateKeyException,
    InvalidArgumentException,
    NotFoundException,
)
from toggler.models import ToggleState


async def _count_states(db) -> int:
    result = await db.execute(select(func.count()).select_from(ToggleState))
    return result.scalar_one()


# ============================================================================
# Create-or-get
# ============================================================================


@pytest.mark.asyncio
async def test_create_or_get_creates_new_state(db, state_service, bus, dark_mode, web):
    """Test that a new pair is created with the candidate value."""
    state = await state_service.create_or_get_state(
        db, schemas.ToggleStateCreate(toggle_id=dark_mode.id, service_id=web.id, value=True)
    )

    assert state.id is not None
    assert state.toggle_id == dark_mode.id
    assert state.service_id == web.id
    assert state.value is True
    assert bus.published == []


@pytest.mark.asyncio
async def test_create_or_get_returns_existing_and_ignores_value(
    db, state_service, bus, dark_mode, web
):
    """Test that a second call returns the stored record and discards its value."""
    first = await state_service.create_or_get_state(
        db, schemas.ToggleStateCreate(toggle_id=dark_mode.id, service_id=web.id, value=True)
    )
    second = await state_service.create_or_get_state(
        db, schemas.ToggleStateCreate(toggle_id=dark_mode.id, service_id=web.id, value=False)
    )

    assert second.id == first.id
    assert second.value is True
    assert await _count_states(db) == 1
    assert bus.published == []


@pytest.mark.asyncio
async def test_create_or_get_allows_unset_value(db, state_service, dark_mode, web):
    """Test that the value may be left unset."""
    state = await state_service.create_or_get_state(
        db, schemas.ToggleStateCreate(toggle_id=dark_mode.id, service_id=web.id)
    )
    assert state.value is None


@pytest.mark.asyncio
async def test_create_or_get_rejects_unknown_toggle(db, state_service, web):
    """Test that a missing toggle is reported as not found."""
    with pytest.raises(NotFoundException):
        await state_service.create_or_get_state(
            db, schemas.ToggleStateCreate(toggle_id=999, service_id=web.id, value=True)
        )
    assert await _count_states(db) == 0


@pytest.mark.asyncio
async def test_create_or_get_recovers_from_concurrent_insert(
    session_factory, db, state_service, dark_mode, web
):
    """Test that losing the insert race returns the winner's record."""
    async with session_factory() as other:
        winner = await crud.toggle_state.create(
            other,
            obj_in={"toggle_id": dark_mode.id, "service_id": web.id, "value": False},
        )
        winner_id = winner.id

    real_get_by_pair = crud.toggle_state.get_by_pair
    calls = {"n": 0}

    async def stale_then_real(*args, **kwargs):
        # First lookup happens "before" the concurrent insert
        calls["n"] += 1
        if calls["n"] == 1:
            return None
        return await real_get_by_pair(*args, **kwargs)

    with patch.object(crud.toggle_state, "get_by_pair", side_effect=stale_then_real):
        state = await state_service.create_or_get_state(
            db,
            schemas.ToggleStateCreate(toggle_id=dark_mode.id, service_id=web.id, value=True),
        )

    assert state.id == winner_id
    assert state.value is False
    assert await _count_states(db) == 1


# ============================================================================
# Replace
# ============================================================================


@pytest.mark.asyncio
async def test_replace_publishes_resolved_state(db, state_service, bus, dark_mode, web):
    """Test that a replacement publishes exactly one event with the stored keys."""
    state = await state_service.create_or_get_state(
        db, schemas.ToggleStateCreate(toggle_id=dark_mode.id, service_id=web.id, value=True)
    )

    await state_service.update_state(
        db,
        state.id,
        schemas.ToggleStateUpdate(
            id=state.id, toggle_id=dark_mode.id, service_id=web.id, value=False
        ),
    )

    assert len(bus.published) == 1
    topic, message = bus.published[0]
    assert topic == "web"
    assert message.toggle_key == "dark-mode"
    assert message.service_key == "web"
    assert message.value is False
    assert message.is_start_message is None

    stored = await state_service.get_state(db, state.id)
    assert stored.value is False


@pytest.mark.asyncio
async def test_patch_has_same_contract_as_update(db, state_service, bus, dark_mode, web):
    """Test that PATCH replaces the whole record and notifies like PUT."""
    state = await state_service.create_or_get_state(
        db, schemas.ToggleStateCreate(toggle_id=dark_mode.id, service_id=web.id, value=False)
    )

    await state_service.patch_state(
        db,
        state.id,
        schemas.ToggleStateUpdate(id=state.id, toggle_id=dark_mode.id, service_id=web.id),
    )

    stored = await state_service.get_state(db, state.id)
    assert stored.value is None
    assert len(bus.published) == 1
    assert bus.published[0][1].value is None


@pytest.mark.asyncio
async def test_replace_with_mismatched_id_fails_without_mutation(
    db, state_service, bus, dark_mode, web
):
    """Test that an id mismatch is rejected before touching the store."""
    state = await state_service.create_or_get_state(
        db, schemas.ToggleStateCreate(toggle_id=dark_mode.id, service_id=web.id, value=True)
    )

    with pytest.raises(InvalidArgumentException):
        await state_service.update_state(
            db,
            state.id,
            schemas.ToggleStateUpdate(
                id=state.id + 1, toggle_id=dark_mode.id, service_id=web.id, value=False
            ),
        )

    stored = await state_service.get_state(db, state.id)
    assert stored.value is True
    assert bus.published == []


@pytest.mark.asyncio
async def test_replace_unknown_state_fails(db, state_service, bus, dark_mode, web):
    """Test that replacing a missing id is reported as not found."""
    with pytest.raises(NotFoundException):
        await state_service.update_state(
            db,
            42,
            schemas.ToggleStateUpdate(id=42, toggle_id=dark_mode.id, service_id=web.id, value=True),
        )
    assert bus.published == []


@pytest.mark.asyncio
async def test_replace_can_rebind_to_free_pair(db, state_service, identities, bus, dark_mode, web):
    """Test that a replacement may move the state to another service."""
    checkout = await identities.create_service(db, schemas.ServiceCreate(key="checkout"))
    state = await state_service.create_or_get_state(
        db, schemas.ToggleStateCreate(toggle_id=dark_mode.id, service_id=web.id, value=True)
    )

    resolved = await state_service.update_state(
        db,
        state.id,
        schemas.ToggleStateUpdate(
            id=state.id, toggle_id=dark_mode.id, service_id=checkout.id, value=True
        ),
    )

    assert resolved.service.key == "checkout"
    assert bus.published[0][0] == "checkout"
    assert bus.published[0][1].service_key == "checkout"


@pytest.mark.asyncio
async def test_replace_cannot_rebind_onto_taken_pair(
    db, state_service, identities, bus, dark_mode, web
):
    """Test that rebinding onto a pair held by another state is rejected."""
    checkout = await identities.create_service(db, schemas.ServiceCreate(key="checkout"))
    on_web = await state_service.create_or_get_state(
        db, schemas.ToggleStateCreate(toggle_id=dark_mode.id, service_id=web.id, value=True)
    )
    await state_service.create_or_get_state(
        db, schemas.ToggleStateCreate(toggle_id=dark_mode.id, service_id=checkout.id, value=False)
    )

    with pytest.raises(DuplicateKeyException):
        await state_service.update_state(
            db,
            on_web.id,
            schemas.ToggleStateUpdate(
                id=on_web.id, toggle_id=dark_mode.id, service_id=checkout.id, value=True
            ),
        )

    assert await _count_states(db) == 2
    assert bus.published == []


@pytest.mark.asyncio
async def test_replace_succeeds_when_publish_fails(
    db, failing_state_service, failing_bus, dark_mode, web
):
    """Test that a bus failure does not undo the committed write."""
    service = failing_state_service
    state = await service.create_or_get_state(
        db, schemas.ToggleStateCreate(toggle_id=dark_mode.id, service_id=web.id, value=True)
    )

    await service.update_state(
        db,
        state.id,
        schemas.ToggleStateUpdate(
            id=state.id, toggle_id=dark_mode.id, service_id=web.id, value=False
        ),
    )

    assert failing_bus.attempts == 1
    stored = await service.get_state(db, state.id)
    assert stored.value is False


@pytest.mark.asyncio
async def test_replace_maps_integrity_error_to_duplicate(db, state_service, dark_mode, web):
    """Test that a constraint violation during the commit is reported as a duplicate."""
    state = await state_service.create_or_get_state(
        db, schemas.ToggleStateCreate(toggle_id=dark_mode.id, service_id=web.id, value=True)
    )

    with patch.object(
        crud.toggle_state,
        "replace",
        side_effect=IntegrityError("UPDATE toggle_state", {}, Exception("unique")),
    ):
        with pytest.raises(DuplicateKeyException):
            await state_service.update_state(
                db,
                state.id,
                schemas.ToggleStateUpdate(
                    id=state.id, toggle_id=dark_mode.id, service_id=web.id, value=False
                ),
            )


# ============================================================================
# Delete and reads
# ============================================================================


@pytest.mark.asyncio
async def test_delete_unknown_state_fails(db, state_service):
    """Test that deleting a missing id is reported as not found."""
    with pytest.raises(NotFoundException):
        await state_service.delete_state(db, 123)


@pytest.mark.asyncio
async def test_delete_removes_state_without_notification(db, state_service, bus, dark_mode, web):
    """Test that a deleted state is gone and nobody was notified."""
    state = await state_service.create_or_get_state(
        db, schemas.ToggleStateCreate(toggle_id=dark_mode.id, service_id=web.id, value=True)
    )

    await state_service.delete_state(db, state.id)

    with pytest.raises(NotFoundException):
        await state_service.get_state(db, state.id)
    assert bus.published == []


@pytest.mark.asyncio
async def test_get_state_by_keys(db, state_service, identities):
    """Test lookup by keys before and after the binding exists."""
    beta = await identities.create_toggle(db, schemas.ToggleCreate(key="beta-feature"))
    checkout = await identities.create_service(db, schemas.ServiceCreate(key="checkout"))

    with pytest.raises(NotFoundException):
        await state_service.get_state_by_keys(db, "beta-feature", "checkout")

    created = await state_service.create_or_get_state(
        db, schemas.ToggleStateCreate(toggle_id=beta.id, service_id=checkout.id, value=True)
    )
    found = await state_service.get_state_by_keys(db, "beta-feature", "checkout")

    assert found.id == created.id
    assert found.toggle.key == "beta-feature"
    assert found.service.key == "checkout"


@pytest.mark.asyncio
@pytest.mark.parametrize("toggle_key,service_key", [("", "web"), ("dark-mode", ""), (None, "web")])
async def test_get_state_by_keys_requires_both_keys(db, state_service, toggle_key, service_key):
    """Test that missing keys are rejected as invalid arguments."""
    with pytest.raises(InvalidArgumentException):
        await state_service.get_state_by_keys(db, toggle_key, service_key)


@pytest.mark.asyncio
async def test_get_state_by_keys_unknown_service(db, state_service, dark_mode):
    """Test that an unknown service key is reported as not found."""
    with pytest.raises(NotFoundException):
        await state_service.get_state_by_keys(db, "dark-mode", "nowhere")


@pytest.mark.asyncio
async def test_list_states(db, state_service, identities, dark_mode, web):
    """Test that list returns every state."""
    assert await state_service.list_states(db) == []

    checkout = await identities.create_service(db, schemas.ServiceCreate(key="checkout"))
    for service_id in (web.id, checkout.id):
        await state_service.create_or_get_state(
            db, schemas.ToggleStateCreate(toggle_id=dark_mode.id, service_id=service_id)
        )

    states = await state_service.list_states(db)
    assert {s.service_id for s in states} == {web.id, checkout.id}


# ============================================================================
# End-to-end scenario and start announcement
# ============================================================================


@pytest.mark.asyncio
async def test_dark_mode_lifecycle(db, state_service, bus, dark_mode, web):
    """Test create, replace and delete of a single state."""
    state = await state_service.create_or_get_state(
        db, schemas.ToggleStateCreate(toggle_id=dark_mode.id, service_id=web.id, value=True)
    )
    assert state.value is True

    await state_service.update_state(
        db,
        state.id,
        schemas.ToggleStateUpdate(
            id=state.id, toggle_id=dark_mode.id, service_id=web.id, value=False
        ),
    )
    assert [(t, m.model_dump(by_alias=True)) for t, m in bus.published] == [
        (
            "web",
            {
                "toggleKey": "dark-mode",
                "serviceKey": "web",
                "value": False,
                "isStartMessage": None,
            },
        )
    ]

    await state_service.delete_state(db, state.id)
    assert len(bus.published) == 1
    assert await state_service.list_states(db) == []


@pytest.mark.asyncio
async def test_announce_service_start(db, state_service, identities, bus, dark_mode, web):
    """Test that every state of the service is published as a start message."""
    beta = await identities.create_toggle(db, schemas.ToggleCreate(key="beta-feature"))
    checkout = await identities.create_service(db, schemas.ServiceCreate(key="checkout"))
    await state_service.create_or_get_state(
        db, schemas.ToggleStateCreate(toggle_id=dark_mode.id, service_id=web.id, value=True)
    )
    await state_service.create_or_get_state(
        db, schemas.ToggleStateCreate(toggle_id=beta.id, service_id=web.id, value=False)
    )
    await state_service.create_or_get_state(
        db, schemas.ToggleStateCreate(toggle_id=beta.id, service_id=checkout.id, value=True)
    )

    published = await state_service.announce_service_start(db, "web")

    assert published == 2
    assert {t for t, _ in bus.published} == {"web"}
    assert {(m.toggle_key, m.value) for _, m in bus.published} == {
        ("dark-mode", True),
        ("beta-feature", False),
    }
    assert all(m.is_start_message is True for _, m in bus.published)


@pytest.mark.asyncio
async def test_announce_unknown_service_fails(db, state_service):
    """Test that announcing an unknown service is reported as not found."""
    with pytest.raises(NotFoundException):
        await state_service.announce_service_start(db, "ghost")
