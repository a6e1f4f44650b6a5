"""Tests for the enrollment sequence and its compensations."""
import asyncio
import logging

import pytest

from arena.errors import (
    AlreadyEnrolled,
    EnrollmentFailed,
    EnrollmentRecordFailed,
    GameMismatch,
    GameNotFound,
    InsufficientBalance,
    RegionMismatch,
    SpotUnavailable,
    StoreError,
    TournamentFull,
    TournamentNotFound,
    UserNotFound,
    ValidationFailed,
)
from arena.models import Region, TransactionType, Wallet
from arena.services.enrollment import EnrollmentRequest, EnrollmentService


def _snapshot(store):
    return {p.name: p.read_bytes() for p in sorted(store.data_dir.glob("*.json"))}


def _request(tournament, user, game_id="free-fire", name="ProGamer"):
    return EnrollmentRequest(game_id=game_id, tournament_id=tournament.id, user_id=user.uid, in_game_name=name)


async def _assert_consistent(repos, tournament_id):
    """Taken spots always match the enrollments on record."""
    t = await repos.tournaments.get_by_id(tournament_id)
    enrollments = await repos.enrollments.list_by_tournament(tournament_id)
    assert 0 <= t.spots_left <= t.total_spots
    assert t.total_spots - t.spots_left == len(enrollments)


@pytest.mark.asyncio
async def test_enroll_success(repos, make_user, make_tournament):
    user = await make_user(credits=30, winnings=100)
    t = await make_tournament(entry_fee=50, total_spots=10, name="Friday Clash")

    result = await EnrollmentService(repos).enroll(_request(t, user, name="  Sniper  "))

    assert (result.deduction.credits, result.deduction.winnings) == (30, 20)
    assert result.tournament.spots_left == 9
    assert result.enrollment.in_game_name == "Sniper"
    assert result.warning is None and not result.audit_degraded
    assert (await repos.users.get_by_id(user.uid)).wallet_balance == Wallet(credits=0, winnings=80)

    txs = await repos.transactions.list_by_user(user.uid)
    assert len(txs) == 1
    tx = txs[0]
    assert tx.type == TransactionType.TOURNAMENT_ENTRY
    assert tx.amount == -50
    assert tx.currency == "USD"
    assert tx.related_id == t.id
    assert "Credits used: 30.00, Winnings used: 20.00" in tx.description
    await _assert_consistent(repos, t.id)


@pytest.mark.asyncio
async def test_result_to_dict(repos, make_user, make_tournament):
    user = await make_user(credits=50)
    t = await make_tournament()
    data = (await EnrollmentService(repos).enroll(_request(t, user))).to_dict()
    assert data["creditsUsed"] == 50
    assert data["winningsUsed"] == 0
    assert data["enrollment"]["inGameName"] == "ProGamer"
    assert data["tournament"]["spotsLeft"] == 9
    assert data["transaction"]["type"] == "tournament_entry"


@pytest.mark.asyncio
async def test_free_tournament_needs_no_balance(repos, make_user, make_tournament):
    user = await make_user()
    t = await make_tournament(entry_fee=0)
    result = await EnrollmentService(repos).enroll(_request(t, user))
    assert result.deduction.total == 0
    assert result.tournament.spots_left == 9


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "case, error",
    [
        ("missing_tournament", TournamentNotFound),
        ("missing_game", GameNotFound),
        ("game_mismatch", GameMismatch),
        ("missing_user", UserNotFound),
        ("region_mismatch", RegionMismatch),
        ("already_enrolled", AlreadyEnrolled),
        ("full", TournamentFull),
        ("insufficient", InsufficientBalance),
        ("short_name", ValidationFailed),
    ],
)
async def test_precondition_failures_change_nothing(case, error, store, repos, make_user, make_tournament):
    user = await make_user(credits=100)
    t = await make_tournament(total_spots=2)
    request = _request(t, user)
    service = EnrollmentService(repos)

    if case == "missing_tournament":
        request.tournament_id = "nope"
    elif case == "missing_game":
        request.game_id = "nope"
    elif case == "game_mismatch":
        request.game_id = "minecraft"
    elif case == "missing_user":
        request.user_id = "999999999"
    elif case == "region_mismatch":
        india = await make_tournament(region=Region.INDIA)
        request.tournament_id = india.id
    elif case == "already_enrolled":
        await service.enroll(_request(t, user))
    elif case == "full":
        other = await make_user(email="other@example.com", credits=100)
        third = await make_user(email="third@example.com", credits=100)
        await service.enroll(_request(t, other))
        await service.enroll(_request(t, third))
    elif case == "insufficient":
        t = await make_tournament(entry_fee=500)
        request.tournament_id = t.id
    elif case == "short_name":
        request.in_game_name = " ab "

    before = _snapshot(store)
    with pytest.raises(error):
        await service.enroll(request)
    assert _snapshot(store) == before


@pytest.mark.asyncio
async def test_region_mismatch_message(repos, make_user, make_tournament):
    user = await make_user(credits=100)
    t = await make_tournament(region=Region.INDIA)
    with pytest.raises(RegionMismatch) as exc:
        await EnrollmentService(repos).enroll(_request(t, user))
    assert exc.value.message == "This tournament is for the INDIA region. Your region is USA."
    assert exc.value.status_code == 403


@pytest.mark.asyncio
async def test_spot_reservation_failure_refunds_wallet(repos, make_user, make_tournament, monkeypatch):
    user = await make_user(credits=30, winnings=100)
    t = await make_tournament()

    async def taken(tournament_id):
        raise TournamentFull()

    monkeypatch.setattr(repos.tournaments, "reserve_spot", taken)
    with pytest.raises(SpotUnavailable) as exc:
        await EnrollmentService(repos).enroll(_request(t, user))

    assert exc.value.message == (
        "Failed to secure a spot: This tournament is already full. Your wallet balance has been restored."
    )
    assert (await repos.users.get_by_id(user.uid)).wallet_balance == Wallet(credits=30, winnings=100)
    assert await repos.enrollments.list() == []
    assert await repos.transactions.list() == []
    await _assert_consistent(repos, t.id)


@pytest.mark.asyncio
async def test_enrollment_record_failure_restores_wallet_and_spot(repos, make_user, make_tournament, monkeypatch):
    user = await make_user(credits=60)
    t = await make_tournament(total_spots=5)

    async def broken(data):
        raise StoreError("disk full")

    monkeypatch.setattr(repos.enrollments, "create", broken)
    with pytest.raises(EnrollmentRecordFailed) as exc:
        await EnrollmentService(repos).enroll(_request(t, user))

    assert exc.value.message.startswith("Enrollment record creation failed: disk full. Your balance")
    assert exc.value.status_code == 500
    assert (await repos.users.get_by_id(user.uid)).wallet_balance == Wallet(credits=60)
    assert (await repos.tournaments.get_by_id(t.id)).spots_left == 5
    assert await repos.transactions.list() == []


@pytest.mark.asyncio
async def test_duplicate_caught_at_record_step_is_already_enrolled(repos, make_user, make_tournament, monkeypatch):
    user = await make_user(credits=100)
    t = await make_tournament(entry_fee=50, total_spots=5)
    service = EnrollmentService(repos)
    await service.enroll(_request(t, user))

    async def not_yet(user_id, tournament_id):
        return False

    # precondition check misses the record written by another request
    monkeypatch.setattr(repos.enrollments, "exists", not_yet)
    with pytest.raises(AlreadyEnrolled) as exc:
        await service.enroll(_request(t, user))

    assert exc.value.status_code == 409
    assert (await repos.users.get_by_id(user.uid)).wallet_balance == Wallet(credits=50)
    assert (await repos.tournaments.get_by_id(t.id)).spots_left == 4
    assert len(await repos.transactions.list_by_user(user.uid)) == 1
    await _assert_consistent(repos, t.id)


@pytest.mark.asyncio
async def test_ledger_failure_keeps_enrollment_with_warning(repos, make_user, make_tournament, monkeypatch, caplog):
    user = await make_user(credits=60)
    t = await make_tournament(name="Night Cup")

    async def broken(data):
        raise StoreError("ledger unavailable")

    monkeypatch.setattr(repos.transactions, "create", broken)
    with caplog.at_level(logging.ERROR, logger="arena.enrollment"):
        result = await EnrollmentService(repos).enroll(_request(t, user))

    assert result.audit_degraded
    assert result.transaction is None
    assert result.enrollment.id in result.warning
    assert "Night Cup" in result.warning
    assert (await repos.users.get_by_id(user.uid)).wallet_balance == Wallet(credits=10)
    assert (await repos.tournaments.get_by_id(t.id)).spots_left == 9
    assert any("CRITICAL" in r.getMessage() for r in caplog.records)
    await _assert_consistent(repos, t.id)


@pytest.mark.asyncio
async def test_unexpected_debit_error_is_reported_as_enrollment_failed(repos, make_user, make_tournament, monkeypatch):
    user = await make_user(credits=60)
    t = await make_tournament()

    async def boom(uid, fn):
        raise RuntimeError("connection reset")

    monkeypatch.setattr(repos.users, "update_wallet", boom)
    with pytest.raises(EnrollmentFailed):
        await EnrollmentService(repos).enroll(_request(t, user))
    assert (await repos.tournaments.get_by_id(t.id)).spots_left == 10


@pytest.mark.asyncio
async def test_failed_compensation_is_logged_and_original_error_kept(
    repos, make_user, make_tournament, monkeypatch, caplog
):
    user = await make_user(credits=60)
    t = await make_tournament()
    real_update_wallet = repos.users.update_wallet
    calls = []

    async def debit_then_fail(uid, fn):
        calls.append(uid)
        if len(calls) > 1:
            raise StoreError("refund write failed")
        return await real_update_wallet(uid, fn)

    async def taken(tournament_id):
        raise TournamentFull()

    monkeypatch.setattr(repos.users, "update_wallet", debit_then_fail)
    monkeypatch.setattr(repos.tournaments, "reserve_spot", taken)
    with caplog.at_level(logging.WARNING, logger="arena.enrollment"):
        with pytest.raises(SpotUnavailable):
            await EnrollmentService(repos).enroll(_request(t, user))
    assert any("compensation failed (refund wallet)" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_last_spot_race_has_one_winner(repos, make_user, make_tournament):
    t = await make_tournament(total_spots=1)
    players = [await make_user(email=f"p{i}@example.com", credits=50) for i in range(4)]
    service = EnrollmentService(repos)

    results = await asyncio.gather(
        *(service.enroll(_request(t, p)) for p in players), return_exceptions=True
    )

    winners = [r for r in results if not isinstance(r, Exception)]
    losers = [r for r in results if isinstance(r, Exception)]
    assert len(winners) == 1
    assert all(isinstance(e, (TournamentFull, SpotUnavailable)) for e in losers)
    await _assert_consistent(repos, t.id)

    balances = sorted([(await repos.users.get_by_id(p.uid)).wallet_balance.credits for p in players])
    assert balances == [0, 50, 50, 50]


@pytest.mark.asyncio
async def test_double_submit_enrolls_once(repos, make_user, make_tournament):
    user = await make_user(credits=200)
    t = await make_tournament()
    service = EnrollmentService(repos)

    results = await asyncio.gather(
        service.enroll(_request(t, user)), service.enroll(_request(t, user)), return_exceptions=True
    )

    assert sum(1 for r in results if not isinstance(r, Exception)) == 1
    errors = [r for r in results if isinstance(r, Exception)]
    assert len(errors) == 1
    assert isinstance(errors[0], AlreadyEnrolled)
    assert errors[0].status_code == 409
    assert (await repos.users.get_by_id(user.uid)).wallet_balance.credits == 150
    assert len(await repos.transactions.list_by_user(user.uid)) == 1
    await _assert_consistent(repos, t.id)
