import pytest

from game import ChangeFeed, ReconciliationLoop
from utils.exceptions import ValidationError


def test_subscribers_receive_events_for_their_table(feed):
    questions, players = [], []
    feed.subscribe("questions", questions.append)
    feed.subscribe("players", players.append)

    event = feed.publish("questions", "insert", record_id="q1")

    assert questions == [event]
    assert players == []
    assert event.sequence == 1
    assert event.to_dict()["record_id"] == "q1"
    assert feed.last_sequence == 1


def test_unsubscribe_stops_delivery(feed):
    seen = []
    unsubscribe = feed.subscribe("answers", seen.append)

    feed.publish("answers", "insert")
    unsubscribe()
    feed.publish("answers", "update")
    unsubscribe()

    assert [event.action for event in seen] == ["insert"]


def test_unknown_table_is_rejected(feed):
    with pytest.raises(ValueError):
        feed.subscribe("scores", lambda event: None)


def test_failing_subscriber_does_not_block_others(feed):
    seen = []

    def broken(event):
        raise RuntimeError("socket gone")

    feed.subscribe("players", broken)
    feed.subscribe("players", seen.append)

    feed.publish("players", "delete", record_id="p1")

    assert len(seen) == 1


def test_publish_sync_covers_every_table(feed):
    seen = []
    for table in ("questions", "players", "answers"):
        feed.subscribe(table, seen.append)

    events = feed.publish_sync()

    assert sorted(event.table for event in events) == ["answers", "players", "questions"]
    assert all(event.action == "sync" for event in seen)
    assert [event.sequence for event in events] == [1, 2, 3]


def test_writes_publish_changes(game, feed, make_question, make_player):
    seen = []
    for table in ("questions", "players", "answers"):
        feed.subscribe(table, seen.append)

    question = make_question()
    player = make_player()
    answer = game.answer_manager.submit_answer(player.id, question.id, "Chiefs")
    game.answer_manager.submit_answer(player.id, question.id, "KC")
    game.scoring.reveal_question(question.id, "Chiefs")
    game.scoring.mark_correct(answer.id, player.id)

    summary = [(event.table, event.action) for event in seen]
    assert summary[:5] == [
        ("questions", "insert"),
        ("players", "insert"),
        ("answers", "insert"),
        ("answers", "update"),
        ("questions", "update"),
    ]
    assert ("players", "update") in summary[5:]
    answer_events = [event for event in seen if event.table == "answers"]
    assert all(event.player_id == player.id for event in answer_events)


def test_repeat_grading_publishes_nothing(game, feed, make_question, make_player):
    question = make_question()
    player = make_player()
    answer = game.answer_manager.submit_answer(player.id, question.id, "Chiefs")
    game.scoring.mark_correct(answer.id, player.id)

    seen = []
    feed.subscribe("players", seen.append)
    game.scoring.mark_correct(answer.id, player.id)

    assert seen == []


def test_failed_write_publishes_nothing(game, feed):
    seen = []
    feed.subscribe("questions", seen.append)

    with pytest.raises(ValidationError):
        game.question_manager.create_question("")

    assert seen == []


def test_reconciliation_loop_syncs_each_interval():
    feed = ChangeFeed()
    seen = []
    feed.subscribe("questions", seen.append)
    loop = ReconciliationLoop(feed, interval_seconds=5)
    sleeps = []

    def fake_sleep(seconds):
        sleeps.append(seconds)
        if len(sleeps) == 3:
            loop.stop()

    loop.run(fake_sleep)

    assert sleeps == [5, 5, 5]
    assert [event.action for event in seen] == ["sync", "sync"]
    assert loop.running is False
