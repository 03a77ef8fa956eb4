import pytest

from database import count_answers, count_questions, get_question_by_id, get_questions
from utils.exceptions import ConflictError, NotFoundError, OrderingConflictError, ValidationError


def test_create_freeform_question_appends_in_order(game, make_question):
    first = make_question("First")
    second = make_question("Second", points=20)

    assert first.question_type == "freeform"
    assert first.options is None
    assert first.points == 10
    assert first.is_active is True
    assert first.is_revealed is False
    assert first.correct_answer is None
    assert (first.question_order, second.question_order) == (1, 2)
    assert second.points == 20


def test_create_multiple_choice_drops_blank_options(game, make_question):
    question = make_question(
        "Halftime headliner?",
        question_type="multiple_choice",
        options=["Usher", "", "  Rihanna ", "   ", "Shakira"],
    )

    assert question.options == ["Usher", "Rihanna", "Shakira"]


@pytest.mark.parametrize(
    "options",
    [None, [], ["Only one"], ["Usher", "  ", ""]],
)
def test_multiple_choice_needs_two_options(game, make_question, options):
    with pytest.raises(ValidationError):
        make_question("Halftime headliner?", question_type="multiple_choice", options=options)

    assert count_questions() == 0


def test_create_rejects_bad_input(game, make_question):
    with pytest.raises(ValidationError):
        make_question("   ")
    with pytest.raises(ValidationError):
        make_question("Q", points=0)
    with pytest.raises(ValidationError):
        make_question("Q", points="10")
    with pytest.raises(ValidationError):
        make_question("Q", question_type="true_false")
    with pytest.raises(ValidationError):
        make_question("Q", question_type="multiple_choice", options=[str(i) for i in range(7)])

    assert count_questions() == 0


def test_freeform_ignores_supplied_options(game, make_question):
    question = make_question("Q", options=["a", "b"])

    assert question.options is None


def test_unreveal_clears_correct_answer(game, make_question):
    question = make_question()
    game.scoring.reveal_question(question.id, "Chiefs")

    edited = game.question_manager.edit_question(question.id, {"is_revealed": False})

    assert edited.is_revealed is False
    assert edited.correct_answer is None
    assert get_question_by_id(question.id).correct_answer is None


def test_unreveal_keeps_replacement_answer_from_same_edit(game, make_question):
    question = make_question()
    game.scoring.reveal_question(question.id, "Chiefs")

    edited = game.question_manager.edit_question(
        question.id, {"is_revealed": False, "correct_answer": "Kansas City"}
    )

    assert edited.is_revealed is False
    assert edited.correct_answer == "Kansas City"


def test_reveal_through_edit_sets_both_fields(game, make_question):
    question = make_question()

    edited = game.question_manager.edit_question(
        question.id, {"is_revealed": True, "correct_answer": " Chiefs "}
    )

    assert edited.is_revealed is True
    assert edited.correct_answer == "Chiefs"


def test_reveal_through_edit_needs_an_answer(game, make_question):
    question = make_question()

    with pytest.raises(ValidationError):
        game.question_manager.edit_question(question.id, {"is_revealed": True})

    assert get_question_by_id(question.id).is_revealed is False


def test_edit_keeps_existing_answer_when_staying_revealed(game, make_question):
    question = make_question()
    game.scoring.reveal_question(question.id, "Chiefs")

    edited = game.question_manager.edit_question(question.id, {"points": 15})

    assert edited.points == 15
    assert edited.is_revealed is True
    assert edited.correct_answer == "Chiefs"


def test_switch_type_rules(game, make_question):
    question = make_question()

    with pytest.raises(ValidationError):
        game.question_manager.edit_question(question.id, {"question_type": "multiple_choice"})

    mc = game.question_manager.edit_question(
        question.id, {"question_type": "multiple_choice", "options": ["Yes", "No", ""]}
    )
    assert mc.question_type == "multiple_choice"
    assert mc.options == ["Yes", "No"]

    with pytest.raises(ValidationError):
        game.question_manager.edit_question(question.id, {"options": ["Yes"]})

    freeform = game.question_manager.edit_question(question.id, {"question_type": "freeform"})
    assert freeform.question_type == "freeform"
    assert freeform.options is None


def test_edit_rejects_unknown_fields_and_missing_question(game, make_question):
    question = make_question()

    with pytest.raises(ValidationError):
        game.question_manager.edit_question(question.id, {"question_order": 5})
    with pytest.raises(ValidationError):
        game.question_manager.edit_question(question.id, {})
    with pytest.raises(ValidationError):
        game.question_manager.edit_question(question.id, {"question_text": ""})
    with pytest.raises(NotFoundError):
        game.question_manager.edit_question("missing", {"points": 5})


def test_unreveal_does_not_touch_awarded_scores(game, make_question, make_player):
    question = make_question(points=10)
    player = make_player()
    answer = game.answer_manager.submit_answer(player.id, question.id, "KC")
    game.scoring.reveal_question(question.id, "Chiefs")
    game.scoring.mark_correct(answer.id, player.id)

    game.question_manager.edit_question(question.id, {"is_revealed": False})

    assert game.player_manager.get_player(player.id).total_score == 10


def test_reorder_assigns_positions(game, make_question):
    q1 = make_question("One")
    q2 = make_question("Two")
    q3 = make_question("Three")

    game.question_manager.reorder([q3.id, q1.id, q2.id])

    orders = {q.id: q.question_order for q in get_questions()}
    assert orders == {q3.id: 1, q1.id: 2, q2.id: 3}
    assert [q.id for q in get_questions()] == [q3.id, q1.id, q2.id]


def test_reorder_rejects_partial_foreign_or_repeated_ids(game, make_question):
    q1 = make_question("One")
    q2 = make_question("Two")
    q3 = make_question("Three")

    with pytest.raises(OrderingConflictError) as partial:
        game.question_manager.reorder([q2.id, q1.id])
    assert isinstance(partial.value, ValidationError)
    assert isinstance(partial.value, ConflictError)
    assert partial.value.details["missing"] == [q3.id]

    with pytest.raises(ValidationError):
        game.question_manager.reorder([q3.id, q2.id, q1.id, "foreign"])
    with pytest.raises(ValidationError):
        game.question_manager.reorder([q3.id, q3.id, q2.id, q1.id])
    with pytest.raises(ValidationError):
        game.question_manager.reorder("q1,q2,q3")

    assert [q.id for q in get_questions()] == [q1.id, q2.id, q3.id]


def test_new_question_goes_after_reordered_ones(game, make_question):
    q1 = make_question("One")
    q2 = make_question("Two")
    game.question_manager.reorder([q2.id, q1.id])

    q3 = make_question("Three")

    assert q3.question_order == 3


def test_delete_question_removes_its_answers(game, make_question, make_player):
    keep = make_question("Keep")
    drop = make_question("Drop")
    player = make_player()
    game.answer_manager.submit_answer(player.id, keep.id, "A")
    game.answer_manager.submit_answer(player.id, drop.id, "B")

    game.question_manager.delete_question(drop.id)

    assert get_question_by_id(drop.id) is None
    assert count_answers() == 1
    with pytest.raises(NotFoundError):
        game.question_manager.delete_question(drop.id)
