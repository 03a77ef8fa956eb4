import threading

import pytest

from database import get_answer_by_id, get_player_by_id, get_question_by_id
from utils.exceptions import NotFoundError, ValidationError


@pytest.fixture
def answered(game, make_question, make_player):
    question = make_question(points=10)
    player = make_player("Jordan")
    answer = game.answer_manager.submit_answer(player.id, question.id, "KC")
    return question, player, answer


def test_reveal_sets_answer_and_flag(game, make_question):
    question = make_question()

    revealed = game.scoring.reveal_question(question.id, "  Chiefs  ")

    assert revealed.is_revealed is True
    assert revealed.correct_answer == "Chiefs"
    stored = get_question_by_id(question.id)
    assert stored.is_revealed is True
    assert stored.correct_answer == "Chiefs"


def test_reveal_twice_overwrites_text_and_keeps_flag(game, make_question):
    question = make_question()

    game.scoring.reveal_question(question.id, "Chiefs")
    game.scoring.reveal_question(question.id, "Kansas City Chiefs")

    stored = get_question_by_id(question.id)
    assert stored.is_revealed is True
    assert stored.correct_answer == "Kansas City Chiefs"


def test_reveal_does_not_grade_answers(game, answered):
    question, player, answer = answered

    game.scoring.reveal_question(question.id, "Chiefs")

    stored = get_answer_by_id(answer.id)
    assert stored.is_correct is None
    assert stored.points_earned == 0
    assert get_player_by_id(player.id).total_score == 0


def test_reveal_rejects_empty_answer_and_unknown_question(game, make_question):
    question = make_question()

    with pytest.raises(ValidationError):
        game.scoring.reveal_question(question.id, "   ")
    with pytest.raises(NotFoundError):
        game.scoring.reveal_question("missing", "Chiefs")

    assert get_question_by_id(question.id).is_revealed is False


def test_mark_correct_awards_points_once(game, answered):
    _, player, answer = answered

    graded = game.scoring.mark_correct(answer.id, player.id, 10)

    assert graded.is_correct is True
    assert graded.points_earned == 10
    assert get_player_by_id(player.id).total_score == 10


def test_mark_correct_twice_does_not_double_count(game, answered):
    _, player, answer = answered

    game.scoring.mark_correct(answer.id, player.id, 10)
    game.scoring.mark_correct(answer.id, player.id, 10)

    assert get_player_by_id(player.id).total_score == 10
    assert get_answer_by_id(answer.id).points_earned == 10


def test_mark_correct_defaults_to_question_points(game, make_question, make_player):
    question = make_question(points=25)
    player = make_player()
    answer = game.answer_manager.submit_answer(player.id, question.id, "Mahomes")

    game.scoring.mark_correct(answer.id, player.id)

    assert get_player_by_id(player.id).total_score == 25


def test_mark_correct_accumulates_across_questions(game, make_question, make_player):
    first = make_question("Q1", points=10)
    second = make_question("Q2", points=5)
    player = make_player()
    a1 = game.answer_manager.submit_answer(player.id, first.id, "A")
    a2 = game.answer_manager.submit_answer(player.id, second.id, "B")

    game.scoring.mark_correct(a1.id, player.id, 10)
    game.scoring.mark_correct(a2.id, player.id, 5)

    assert get_player_by_id(player.id).total_score == 15


def test_mark_correct_failures(game, answered, make_player):
    _, player, answer = answered
    other = make_player("Casey")

    with pytest.raises(NotFoundError):
        game.scoring.mark_correct("missing", player.id, 10)
    with pytest.raises(NotFoundError):
        game.scoring.mark_correct(answer.id, "missing", 10)
    with pytest.raises(ValidationError):
        game.scoring.mark_correct(answer.id, other.id, 10)
    with pytest.raises(ValidationError):
        game.scoring.mark_correct(answer.id, player.id, -5)

    assert get_answer_by_id(answer.id).is_correct is None
    assert get_player_by_id(player.id).total_score == 0
    assert get_player_by_id(other.id).total_score == 0


def test_mark_incorrect_takes_points_back(game, answered):
    _, player, answer = answered
    game.scoring.mark_correct(answer.id, player.id, 10)

    graded = game.scoring.mark_incorrect(answer.id, player.id)

    assert graded.is_correct is False
    assert graded.points_earned == 0
    assert get_player_by_id(player.id).total_score == 0

    # A second un-mark changes nothing
    game.scoring.mark_incorrect(answer.id, player.id)
    assert get_player_by_id(player.id).total_score == 0


def test_mark_incorrect_on_ungraded_answer(game, answered):
    _, player, answer = answered

    graded = game.scoring.mark_incorrect(answer.id, player.id)

    assert graded.is_correct is False
    assert get_player_by_id(player.id).total_score == 0


def test_remark_correct_after_incorrect_awards_again(game, answered):
    _, player, answer = answered

    game.scoring.mark_correct(answer.id, player.id, 10)
    game.scoring.mark_incorrect(answer.id, player.id)
    game.scoring.mark_correct(answer.id, player.id, 10)

    assert get_player_by_id(player.id).total_score == 10


def test_recompute_scores_repairs_totals_after_question_delete(game, answered, make_player):
    question, player, answer = answered
    game.scoring.mark_correct(answer.id, player.id, 10)
    bystander = make_player("Riley")

    game.question_manager.delete_question(question.id)
    assert get_player_by_id(player.id).total_score == 10

    changed = game.scoring.recompute_scores()

    assert changed == {player.id: 0}
    assert get_player_by_id(player.id).total_score == 0
    assert get_player_by_id(bystander.id).total_score == 0


def test_recompute_scores_is_noop_when_consistent(game, answered):
    _, player, answer = answered
    game.scoring.mark_correct(answer.id, player.id, 10)

    assert game.scoring.recompute_scores() == {}
    assert get_player_by_id(player.id).total_score == 10


def test_concurrent_mark_correct_awards_once(game, answered):
    _, player, answer = answered
    workers = 8
    barrier = threading.Barrier(workers)
    errors = []

    def grade():
        barrier.wait()
        try:
            game.scoring.mark_correct(answer.id, player.id, 10)
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=grade) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert get_player_by_id(player.id).total_score == 10
    assert get_answer_by_id(answer.id).points_earned == 10
