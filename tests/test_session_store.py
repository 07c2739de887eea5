"""Tests for the in-memory session store."""

from dataclasses import replace
from uuid import uuid4

import pytest

from workshop_scribe.domain.sessions import ImageStatus, Report
from workshop_scribe.services.errors import ImageNotFoundError, SessionNotFoundError
from workshop_scribe.services.ingestion import build_image
from workshop_scribe.services.store import SessionStore
from tests.conftest import upload


def test_create_session_sets_default_title_and_activates() -> None:
    store = SessionStore()

    session = store.create_session()

    assert session.title.startswith("Workshop ")
    assert store.active_session_id == session.id
    assert session.images == ()
    assert session.report is None


def test_list_sessions_returns_newest_first() -> None:
    store = SessionStore()
    first = store.create_session("First")
    second = store.create_session("Second")

    assert [item.id for item in store.list_sessions()] == [second.id, first.id]


def test_image_order_is_stable_under_updates() -> None:
    store = SessionStore()
    session = store.create_session()
    images = [build_image(upload(filename=f"{index}.png")) for index in range(3)]
    store.add_images(session.id, images)

    store.update_image(
        session.id,
        images[1].id,
        lambda image: replace(image, status=ImageStatus.ANALYZING),
    )
    store.update_image(
        session.id,
        images[0].id,
        lambda image: replace(image, status=ImageStatus.ANALYZING),
    )

    stored = store.require_session(session.id)
    assert [image.id for image in stored.images] == [image.id for image in images]
    assert stored.images[1].status == ImageStatus.ANALYZING
    assert stored.images[2].status == ImageStatus.PENDING


def test_updates_for_missing_ids_are_noops() -> None:
    store = SessionStore()
    session = store.create_session()

    assert store.update_session(uuid4(), lambda current: current) is None
    assert store.update_image(session.id, uuid4(), lambda image: image) is None
    assert store.require_session(session.id) == session


def test_delete_session_cascades() -> None:
    store = SessionStore()
    session = store.create_session()
    image = build_image(upload())
    store.add_images(session.id, [image])
    store.update_session(
        session.id,
        lambda current: replace(
            current, report=Report(markdown="# R", generated_at=current.created_at)
        ),
    )

    assert store.delete_session(session.id) is True

    assert store.get_session(session.id) is None
    assert store.active_session_id is None
    assert store.list_sessions() == []
    assert store.update_image(session.id, image.id, lambda item: item) is None
    assert store.delete_session(session.id) is False


def test_remove_image_and_rename() -> None:
    store = SessionStore()
    session = store.create_session()
    keep, drop = build_image(upload()), build_image(upload())
    store.add_images(session.id, [keep, drop])

    store.remove_image(session.id, drop.id)
    renamed = store.rename_session(session.id, "Retro")

    assert [image.id for image in renamed.images] == [keep.id]
    assert renamed.title == "Retro"
    with pytest.raises(ImageNotFoundError):
        store.remove_image(session.id, drop.id)


def test_require_session_and_set_active_reject_unknown_ids() -> None:
    store = SessionStore()

    with pytest.raises(SessionNotFoundError):
        store.require_session(uuid4())
    with pytest.raises(SessionNotFoundError):
        store.set_active(uuid4())
    with pytest.raises(SessionNotFoundError):
        store.require_session(None)
