"""Service tests for ladder match recording against a SQLite database."""

from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy.orm import Session, sessionmaker

from domain.config import ClubConfig
from domain.errors import ConcurrentUpdateError, DuplicateError, MembershipError, NotFoundError, ValidationError
from domain.ladder import LadderMatchSubmission
from domain.protocol import LadderType, RatingContext
from repositories.ladder import fetch_ladder_matches
from repositories.ratings import count_tracked_players, fetch_player_ratings
from services.ladder_service import LadderService

MATCH_DATE = date(2026, 4, 18)


def _ratings(session_factory: sessionmaker[Session], player_ids, context=RatingContext.SINGLES):
    with session_factory() as session:
        return fetch_player_ratings(session, player_ids, context=context, initial_elo=1200)


@pytest.fixture()
def service(session_factory: sessionmaker[Session], config: ClubConfig) -> LadderService:
    return LadderService(session_factory, config)


@pytest.fixture()
def singles_ladder(service: LadderService, player_ids: list[int]) -> int:
    ladder_id = service.create_ladder(name="Club singles", kind=LadderType.SINGLES)
    for player_id in player_ids[:4]:
        service.join(ladder_id=ladder_id, player_id=player_id)
    return ladder_id


def _submission(ladder_id: int, player1_id: int, player2_id: int, score: str = "6-4 6-3", **kwargs):
    return LadderMatchSubmission.from_tennis_score(
        ladder_id=ladder_id,
        player1_id=player1_id,
        player2_id=player2_id,
        score=score,
        match_date=kwargs.pop("match_date", MATCH_DATE),
        **kwargs,
    )


def test_record_match_persists_match_and_ratings(
    service: LadderService,
    session_factory: sessionmaker[Session],
    singles_ladder: int,
    player_ids: list[int],
) -> None:
    ana, ben = player_ids[0], player_ids[1]

    recorded = service.record_match(_submission(singles_ladder, ana, ben))

    ratings = _ratings(session_factory, [ana, ben])
    assert ratings[ana].rating == 1216
    assert ratings[ben].rating == 1184
    assert (ratings[ana].matches_played, ratings[ana].matches_won) == (1, 1)
    assert (ratings[ben].matches_played, ratings[ben].matches_won) == (1, 0)

    with session_factory() as session:
        (match,) = fetch_ladder_matches(session, singles_ladder)
        assert match.id == recorded.match_id
        assert (match.player1_score, match.player2_score) == (2, 0)
        assert match.winner_id == ana
        assert (match.player1_elo_before, match.player1_elo_after) == (1200, 1216)
        assert count_tracked_players(session) == 2


def test_duplicate_submission_rejected_and_ratings_unchanged(
    service: LadderService,
    session_factory: sessionmaker[Session],
    singles_ladder: int,
    player_ids: list[int],
) -> None:
    ana, ben = player_ids[0], player_ids[1]
    service.record_match(_submission(singles_ladder, ana, ben))
    before = _ratings(session_factory, [ana, ben])

    with pytest.raises(DuplicateError):
        service.record_match(_submission(singles_ladder, ben, ana, score="4-6 3-6"))

    assert _ratings(session_factory, [ana, ben]) == before
    with session_factory() as session:
        assert len(fetch_ladder_matches(session, singles_ladder)) == 1


def test_non_member_and_departed_member_rejected(
    service: LadderService,
    singles_ladder: int,
    player_ids: list[int],
) -> None:
    ana, ben, finn = player_ids[0], player_ids[1], player_ids[5]

    with pytest.raises(MembershipError):
        service.record_match(_submission(singles_ladder, ana, finn))

    service.leave(ladder_id=singles_ladder, player_id=ben)
    with pytest.raises(MembershipError, match=f"Player {ben}"):
        service.record_match(_submission(singles_ladder, ana, ben))


def test_tied_sets_rejected(service: LadderService, singles_ladder: int, player_ids: list[int]) -> None:
    with pytest.raises(ValidationError, match="tie"):
        service.record_match(_submission(singles_ladder, player_ids[0], player_ids[1], score="6-4 4-6"))


def test_unknown_ladder_raises_not_found(service: LadderService, player_ids: list[int]) -> None:
    with pytest.raises(NotFoundError):
        service.record_match(_submission(999, player_ids[0], player_ids[1]))


def test_doubles_ladder_uses_separate_rating_pool(
    service: LadderService,
    session_factory: sessionmaker[Session],
    player_ids: list[int],
) -> None:
    ladder_id = service.create_ladder(name="Club doubles", kind=LadderType.DOUBLES)
    for player_id in player_ids[:4]:
        service.join(ladder_id=ladder_id, player_id=player_id)
    ana, ben, cleo, dan = player_ids[:4]

    recorded = service.record_match(
        _submission(ladder_id, ana, ben, player1_partner_id=cleo, player2_partner_id=dan)
    )

    assert len(recorded.plan.updates) == 4
    doubles = _ratings(session_factory, player_ids[:4], context=RatingContext.DOUBLES)
    singles = _ratings(session_factory, player_ids[:4])
    assert doubles[ana].rating == doubles[cleo].rating == 1216
    assert doubles[ben].rating == doubles[dan].rating == 1184
    assert all(rating.rating == 1200 and rating.matches_played == 0 for rating in singles.values())


def test_leaderboard_ranks_active_members_by_rating(
    service: LadderService,
    singles_ladder: int,
    player_ids: list[int],
) -> None:
    ana, ben, cleo, dan = player_ids[:4]
    service.record_match(_submission(singles_ladder, cleo, ana))
    service.record_match(_submission(singles_ladder, cleo, ben, match_date=date(2026, 4, 19)))
    service.leave(ladder_id=singles_ladder, player_id=dan)

    entries = service.leaderboard(singles_ladder)

    assert [entry.player_id for entry in entries][0] == cleo
    assert [entry.rank for entry in entries] == [1, 2, 3]
    assert dan not in {entry.player_id for entry in entries}
    assert entries[0].display_name == "Cleo Carter"
    assert (entries[0].matches_played, entries[0].matches_won) == (2, 2)
    assert entries[0].win_rate == pytest.approx(1.0)
    assert entries[-1].matches_played == 1
    assert entries[-1].win_rate == pytest.approx(0.0)


def test_history_lists_events_in_sequence(
    service: LadderService,
    singles_ladder: int,
    player_ids: list[int],
) -> None:
    ana, ben, cleo = player_ids[:3]
    service.record_match(_submission(singles_ladder, ana, ben))
    service.record_match(_submission(singles_ladder, ana, cleo, score="3-6 6-7"))

    events = service.history(ana)

    assert [event.sequence for event in events] == [1, 2]
    assert events[0].post_rating == events[1].pre_rating
    assert [event.won for event in events] == [True, False]


def test_stale_snapshot_loses_race_and_rolls_back(
    service: LadderService,
    session_factory: sessionmaker[Session],
    singles_ladder: int,
    player_ids: list[int],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    ana, ben, cleo = player_ids[:3]
    late = _submission(singles_ladder, ana, cleo, match_date=date(2026, 4, 20))
    with session_factory() as session:
        stale = service.load_snapshot(session, late)

    service.record_match(_submission(singles_ladder, ana, ben))
    monkeypatch.setattr(service, "load_snapshot", lambda session, submission: stale)

    with pytest.raises(ConcurrentUpdateError):
        service.record_match(late)

    with session_factory() as session:
        assert len(fetch_ladder_matches(session, singles_ladder)) == 1
    assert _ratings(session_factory, [cleo])[cleo].matches_played == 0
