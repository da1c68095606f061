"""Races between lifecycle operations running on separate sessions and threads."""

import threading

import pytest

from conftest import actor_for
from mentor_matching.exceptions import BusinessLogicError, ConflictError
from mentor_matching.models import MatchingRequest, MatchingStatus, UserRole
from mentor_matching.schemas import MatchingRequestCreate
from mentor_matching.services import MatchingRequestService


def _run_concurrently(session_factory, calls):
    """Runs each call(service) on its own thread and session, all released at once."""
    barrier = threading.Barrier(len(calls))
    results = [None] * len(calls)

    def _worker(index, call):
        session = session_factory()
        try:
            barrier.wait()
            results[index] = call(MatchingRequestService(session))
        except BusinessLogicError as e:
            results[index] = e
        finally:
            session.close()

    threads = [threading.Thread(target=_worker, args=(i, call)) for i, call in enumerate(calls)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)
    return results


def _successes(results):
    return [r for r in results if isinstance(r, MatchingRequest)]


def _conflicts(results):
    return [r for r in results if isinstance(r, ConflictError)]


def test_double_create_yields_one_success_and_one_conflict(db, session_factory, mentee, mentor, other_mentor):
    actor = actor_for(mentee)
    mentor_ids = [mentor.id, other_mentor.id]
    db.close()

    results = _run_concurrently(session_factory, [
        lambda service, mentor_id=mentor_id: service.create_request(
            actor, MatchingRequestCreate(mentor_id=mentor_id, message="hello")
        )
        for mentor_id in mentor_ids
    ])

    assert len(_successes(results)) == 1
    assert len(_conflicts(results)) == 1

    session = session_factory()
    try:
        pending = session.query(MatchingRequest).filter(
            MatchingRequest.mentee_id == actor.id,
            MatchingRequest.status == MatchingStatus.PENDING.value
        ).count()
    finally:
        session.close()
    assert pending == 1


def test_many_concurrent_creates_leave_one_pending(db, session_factory, make_user, mentee):
    actor = actor_for(mentee)
    mentor_ids = [make_user(UserRole.MENTOR).id for _ in range(6)]
    db.close()

    results = _run_concurrently(session_factory, [
        lambda service, mentor_id=mentor_id: service.create_request(
            actor, MatchingRequestCreate(mentor_id=mentor_id, message="hello")
        )
        for mentor_id in mentor_ids
    ])

    assert len(_successes(results)) == 1
    assert len(_conflicts(results)) == len(mentor_ids) - 1


def test_double_accept_has_one_winner(db, service, session_factory, mentee, mentor):
    request = service.create_request(actor_for(mentee), MatchingRequestCreate(mentor_id=mentor.id, message="hi"))
    mentor_actor = actor_for(mentor)
    request_id = request.id
    db.close()

    results = _run_concurrently(session_factory, [
        lambda service: service.accept_request(mentor_actor, request_id),
        lambda service: service.accept_request(mentor_actor, request_id),
    ])

    assert len(_successes(results)) == 1
    assert len(_conflicts(results)) == 1


@pytest.mark.parametrize("attempt", range(3))
def test_accept_and_cancel_race(db, service, session_factory, mentee, mentor, attempt):
    request = service.create_request(actor_for(mentee), MatchingRequestCreate(mentor_id=mentor.id, message="hi"))
    mentor_actor, mentee_actor = actor_for(mentor), actor_for(mentee)
    request_id = request.id
    db.close()

    results = _run_concurrently(session_factory, [
        lambda service: service.accept_request(mentor_actor, request_id),
        lambda service: service.cancel_request(mentee_actor, request_id),
    ])

    winners = _successes(results)
    assert len(winners) == 1
    assert len(_conflicts(results)) == 1

    session = session_factory()
    try:
        final_status = session.get(MatchingRequest, request_id).status
    finally:
        session.close()
    assert final_status == winners[0].status
    assert final_status in (MatchingStatus.ACCEPTED.value, MatchingStatus.CANCELLED.value)


def test_concurrent_cancels_are_both_successful(db, service, session_factory, mentee, mentor):
    request = service.create_request(actor_for(mentee), MatchingRequestCreate(mentor_id=mentor.id, message="hi"))
    mentee_actor = actor_for(mentee)
    request_id = request.id
    db.close()

    results = _run_concurrently(session_factory, [
        lambda service: service.cancel_request(mentee_actor, request_id),
        lambda service: service.cancel_request(mentee_actor, request_id),
    ])

    assert len(_successes(results)) == 2
    assert all(r.status == MatchingStatus.CANCELLED.value for r in results)
