import pytest

from placement_prep.models.records import CodingQuestion
from placement_prep.services.coding_evaluator import (
    PARTIAL_CREDIT_FEEDBACK, CodingEvaluator, build_evaluation_prompt, review_code, validate_verdict
)
from tests.conftest import ScriptedJudge, verdict


def question(name="Sum two numbers"):
    return CodingQuestion.model_validate({
        "question": name,
        "description": "Read a and b, print a + b",
        "testCases": [{"input": "1 2", "expectedOutput": "3"}]
    })


def test_valid_verdict_is_used():
    judge = ScriptedJudge(verdict(0.8))
    result = CodingEvaluator(judge).evaluate([question()], ["print(sum(map(int, input().split())))"])

    assert result.score_sum == pytest.approx(0.8)
    assert len(result.feedback) == 1
    feedback = result.feedback[0]
    assert feedback.question_index == 0
    assert feedback.passes_all_tests is True
    assert feedback.correctness == 90


def test_fenced_json_is_accepted():
    judge = ScriptedJudge("```json\n" + verdict(1) + "\n```")
    result = CodingEvaluator(judge).evaluate([question()], ["code"])
    assert result.score_sum == 1


def test_judge_exception_awards_partial_credit():
    judge = ScriptedJudge(TimeoutError("judge timed out"))
    result = CodingEvaluator(judge).evaluate([question()], ["code"])

    feedback = result.feedback[0]
    assert result.score_sum == 0.5
    assert feedback.score == 0.5
    assert feedback.feedback == PARTIAL_CREDIT_FEEDBACK
    assert feedback.passes_all_tests is False
    assert (feedback.performance, feedback.readability, feedback.correctness) == (50, 50, 50)


@pytest.mark.parametrize("raw", [
    "not json at all",
    '{"feedback": "no score"}',
    '{"score": 1.7, "feedback": "too high"}',
    '{"score": true, "feedback": "bool"}',
    '[0.5]',
])
def test_unusable_verdict_awards_partial_credit(raw):
    result = CodingEvaluator(ScriptedJudge(raw)).evaluate([question()], ["code"])
    assert result.feedback[0].feedback == PARTIAL_CREDIT_FEEDBACK
    assert result.score_sum == 0.5


def test_one_failure_does_not_affect_other_questions():
    judge = ScriptedJudge(RuntimeError("boom"), verdict(1))
    result = CodingEvaluator(judge).evaluate([question("A"), question("B")], ["a", "b"])

    assert [f.score for f in result.feedback] == [0.5, 1.0]
    assert result.score_sum == 1.5


def test_empty_solutions_are_skipped():
    judge = ScriptedJudge(verdict(1))
    result = CodingEvaluator(judge).evaluate([question("A"), question("B"), question("C")], ["", "code"])

    assert len(judge.prompts) == 1
    assert [f.question_index for f in result.feedback] == [1]
    assert result.score_sum == 1


def test_prompt_contains_question_and_test_cases():
    prompt = build_evaluation_prompt(question(), "print(3)")
    assert "Sum two numbers" in prompt
    assert "Input: 1 2, Expected Output: 3" in prompt
    assert "print(3)" in prompt


def test_validate_verdict_sanitizes_fields():
    data = validate_verdict({
        "score": 1,
        "performance": 250,
        "readability": "n/a",
        "passesAllTests": "yes",
        "identifiedIssues": [{"type": "style", "severity": "high", "description": " long lines "}, "junk"]
    })
    assert data["score"] == 1.0
    assert data["performance"] == 100
    assert data["readability"] == 0
    assert data["passesAllTests"] is False
    assert data["identifiedIssues"] == [{"type": "style", "severity": "high", "description": "long lines"}]


def test_review_code_returns_judge_text():
    judge = ScriptedJudge("Looks fine, O(n).")
    assert review_code(judge, "x = 1", "Assign one") == "Looks fine, O(n)."
    assert "x = 1" in judge.prompts[0]


def test_review_code_propagates_failures():
    with pytest.raises(RuntimeError):
        review_code(ScriptedJudge(RuntimeError("down")), "x = 1", "Assign one")
