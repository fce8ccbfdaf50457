"""Friend request state machine."""

from datetime import datetime, timezone

import pytest
from fastapi import HTTPException

from auth import repository as user_repository
from friends import repository, service

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)
ALICE = {"id": 1, "name": "Alice"}


def returns(value):
    async def _fn(*args, **kwargs):
        return value

    return _fn


def _request(request_id=10, sender_id=2, receiver_id=1, status="pending"):
    return {
        "id": request_id,
        "sender_id": sender_id,
        "receiver_id": receiver_id,
        "status": status,
        "created_at": NOW,
        "updated_at": NOW,
    }


@pytest.fixture
def target(monkeypatch):
    user = {"id": 2, "name": "Bob", "is_active": True}
    monkeypatch.setattr(user_repository, "get_user_by_id", returns(user))
    monkeypatch.setattr(repository, "are_friends", returns(False))
    monkeypatch.setattr(repository, "get_pending_request", returns(None))
    return user


def test_edge_is_canonical():
    assert repository.edge(5, 2) == (2, 5)
    assert repository.edge(2, 5) == (2, 5)
    with pytest.raises(ValueError):
        repository.edge(3, 3)


@pytest.mark.asyncio
async def test_cannot_befriend_self():
    with pytest.raises(HTTPException) as exc_info:
        await service.send_request(viewer=ALICE, target_id=1)
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_unknown_target_is_404(monkeypatch):
    monkeypatch.setattr(user_repository, "get_user_by_id", returns(None))
    with pytest.raises(HTTPException) as exc_info:
        await service.send_request(viewer=ALICE, target_id=2)
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_already_friends_is_conflict(monkeypatch, target):
    monkeypatch.setattr(repository, "are_friends", returns(True))
    with pytest.raises(HTTPException) as exc_info:
        await service.send_request(viewer=ALICE, target_id=2)
    assert exc_info.value.status_code == 409


@pytest.mark.asyncio
async def test_duplicate_request_is_conflict(monkeypatch, target):
    async def pending(*, sender_id, receiver_id):
        return _request(sender_id=1, receiver_id=2) if sender_id == 1 else None

    monkeypatch.setattr(repository, "get_pending_request", pending)
    with pytest.raises(HTTPException) as exc_info:
        await service.send_request(viewer=ALICE, target_id=2)
    assert exc_info.value.status_code == 409


@pytest.mark.asyncio
async def test_send_request_creates_pending(monkeypatch, target):
    calls = []

    async def create(**kwargs):
        calls.append(kwargs)
        return _request(sender_id=1, receiver_id=2)

    monkeypatch.setattr(repository, "create_request", create)
    result = await service.send_request(viewer=ALICE, target_id=2)

    assert calls == [{"sender_id": 1, "receiver_id": 2, "sender_name": "Alice"}]
    assert result["friends"] is False
    assert result["request"]["status"] == "pending"


@pytest.mark.asyncio
async def test_crossing_requests_accept_the_existing_one(monkeypatch, target):
    async def pending(*, sender_id, receiver_id):
        return _request(request_id=7, sender_id=2, receiver_id=1) if sender_id == 2 else None

    accepted = []

    async def accept(request_id, *, receiver_name):
        accepted.append((request_id, receiver_name))
        return _request(request_id=7, sender_id=2, receiver_id=1, status="accepted")

    monkeypatch.setattr(repository, "get_pending_request", pending)
    monkeypatch.setattr(repository, "accept_request", accept)

    result = await service.send_request(viewer=ALICE, target_id=2)
    assert accepted == [(7, "Alice")]
    assert result["friends"] is True
    assert result["request"]["status"] == "accepted"


@pytest.mark.asyncio
async def test_only_receiver_can_accept(monkeypatch):
    monkeypatch.setattr(repository, "get_request", returns(_request(receiver_id=3)))
    with pytest.raises(HTTPException) as exc_info:
        await service.accept_request(10, viewer=ALICE)
    assert exc_info.value.status_code == 403


@pytest.mark.asyncio
async def test_answered_request_cannot_be_answered_again(monkeypatch):
    monkeypatch.setattr(repository, "get_request", returns(_request(status="rejected")))
    with pytest.raises(HTTPException) as exc_info:
        await service.accept_request(10, viewer=ALICE)
    assert exc_info.value.status_code == 409
    assert exc_info.value.detail == "Friend request is already rejected."


@pytest.mark.asyncio
async def test_missing_request_is_404(monkeypatch):
    monkeypatch.setattr(repository, "get_request", returns(None))
    with pytest.raises(HTTPException) as exc_info:
        await service.reject_request(10, viewer_id=1)
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_accept_and_reject(monkeypatch):
    monkeypatch.setattr(repository, "get_request", returns(_request()))
    monkeypatch.setattr(repository, "accept_request", returns(_request(status="accepted")))
    monkeypatch.setattr(repository, "reject_request", returns(_request(status="rejected")))

    accepted = await service.accept_request(10, viewer=ALICE)
    assert accepted["request"]["status"] == "accepted"

    rejected = await service.reject_request(10, viewer_id=1)
    assert rejected["request"]["status"] == "rejected"


@pytest.mark.asyncio
async def test_accept_lost_race_is_conflict(monkeypatch):
    monkeypatch.setattr(repository, "get_request", returns(_request()))
    monkeypatch.setattr(repository, "accept_request", returns(None))
    with pytest.raises(HTTPException) as exc_info:
        await service.accept_request(10, viewer=ALICE)
    assert exc_info.value.status_code == 409


@pytest.mark.asyncio
async def test_remove_friend(monkeypatch):
    monkeypatch.setattr(repository, "delete_friendship", returns(True))
    assert await service.remove_friend(2, viewer_id=1) == {"ok": True, "friendId": 2}

    monkeypatch.setattr(repository, "delete_friendship", returns(False))
    with pytest.raises(HTTPException) as exc_info:
        await service.remove_friend(2, viewer_id=1)
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_list_requests_shapes_both_directions(monkeypatch):
    incoming = dict(_request(), sender_name="Bob", sender_avatar=None)
    outgoing = dict(_request(request_id=11, sender_id=1, receiver_id=3), receiver_name="Carol", receiver_avatar=None)
    monkeypatch.setattr(repository, "list_incoming_requests", returns([incoming]))
    monkeypatch.setattr(repository, "list_outgoing_requests", returns([outgoing]))

    result = await service.list_requests(viewer_id=1)
    assert result["incoming"][0]["sender"] == {"id": 2, "name": "Bob", "avatar": None}
    assert result["outgoing"][0]["receiver"] == {"id": 3, "name": "Carol", "avatar": None}
