"""
Coding Evaluator - scores coding answers with the LLM judge.

PURPOSE:
For each coding question with a non-empty solution:
1. Build an evaluation prompt (question, description, test cases, code)
2. Ask the judge for a strict JSON verdict
3. Validate and sanitize the verdict
4. On ANY failure (API error, timeout, bad JSON, invalid verdict) award
   partial credit instead of failing the whole submission

The evaluator never touches the database; the orchestrator persists results.
"""

import logging
from typing import List, Optional, Sequence

from placement_prep.core.errors import ExternalEvaluationError
from placement_prep.models.records import CodingFeedback, CodingQuestion, IdentifiedIssue
from placement_prep.services.llm_client import CodeJudge, extract_json

logger = logging.getLogger(__name__)

PARTIAL_CREDIT_SCORE = 0.5
PARTIAL_CREDIT_METRIC = 50
PARTIAL_CREDIT_FEEDBACK = "Error during automated evaluation. Partial credit awarded."

EVALUATION_PROMPT = """You are an automated code evaluator. Evaluate the following code solution for correctness:

Problem: {question}
Description: {description}

Test Cases:
{test_cases}

Student's solution:
```
{solution}
```

Evaluate if the solution correctly solves the problem and passes all test cases.
Return a JSON object with the following structure:
{{
  "score": number between 0 and 1 (0 for completely incorrect, 1 for perfect),
  "feedback": string explaining the evaluation,
  "passesAllTests": boolean,
  "performance": number between 0 and 100,
  "readability": number between 0 and 100,
  "correctness": number between 0 and 100,
  "identifiedIssues": [
    {{
      "type": "performance" | "style" | "correctness",
      "severity": "low" | "medium" | "high",
      "description": string explaining the issue
    }}
  ]
}}

Only return the JSON object, nothing else."""

REVIEW_PROMPT = """You are a coding instructor evaluating a student's solution to the following problem:

Problem: {question}

Student's solution:
```
{code}
```

Please evaluate the code and provide feedback on:
1. Correctness: Does the code solve the problem correctly?
2. Efficiency: Is the solution efficient? What's the time and space complexity?
3. Code quality: Is the code well-structured, readable, and following best practices?
4. Suggestions for improvement

Format your response in a clear, concise manner that would be helpful for a student."""


# ============================================================
# VERDICT VALIDATION
# ============================================================

def _metric(value) -> float:
    """Coerce a 0..100 metric; anything unusable becomes 0."""
    try:
        return min(100.0, max(0.0, float(value)))
    except (TypeError, ValueError):
        return 0.0


def validate_verdict(data: dict) -> dict:
    """
    Validate and sanitize a judge verdict.

    `score` must be a number in [0, 1]; anything else makes the whole verdict
    unusable. The remaining fields are coerced to safe defaults.

    Raises:
        ValueError: missing or out-of-range score
    """
    score = data.get("score")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise ValueError(f"Verdict score is not a number: {score!r}")
    if not 0 <= score <= 1:
        raise ValueError(f"Verdict score out of range: {score}")

    issues = []
    raw_issues = data.get("identifiedIssues", [])
    if isinstance(raw_issues, list):
        for issue in raw_issues:
            if isinstance(issue, dict):
                issues.append({
                    "type": str(issue.get("type", "correctness")).strip(),
                    "severity": str(issue.get("severity", "low")).strip(),
                    "description": str(issue.get("description", "")).strip()
                })

    passes = data.get("passesAllTests")
    return {
        "score": float(score),
        "feedback": str(data.get("feedback") or "").strip(),
        "passesAllTests": passes if isinstance(passes, bool) else False,
        "performance": _metric(data.get("performance", 0)),
        "readability": _metric(data.get("readability", 0)),
        "correctness": _metric(data.get("correctness", 0)),
        "identifiedIssues": issues
    }


def partial_credit_feedback(question_index: int) -> CodingFeedback:
    return CodingFeedback(
        question_index=question_index,
        feedback=PARTIAL_CREDIT_FEEDBACK,
        score=PARTIAL_CREDIT_SCORE,
        passes_all_tests=False,
        performance=PARTIAL_CREDIT_METRIC,
        readability=PARTIAL_CREDIT_METRIC,
        correctness=PARTIAL_CREDIT_METRIC,
        identified_issues=[]
    )


def build_evaluation_prompt(question: CodingQuestion, solution: str) -> str:
    test_cases = "\n".join(
        f"Input: {tc.input}, Expected Output: {tc.expected_output}" for tc in question.test_cases
    )
    return EVALUATION_PROMPT.format(
        question=question.question,
        description=question.description,
        test_cases=test_cases,
        solution=solution
    )


# ============================================================
# EVALUATOR
# ============================================================

class CodingEvaluation:
    """Sum of per-question scores (0..1 each) plus the feedback entries."""

    def __init__(self, score_sum: float = 0.0, feedback: Optional[List[CodingFeedback]] = None):
        self.score_sum = score_sum
        self.feedback = feedback or []

    def __repr__(self) -> str:
        return f"CodingEvaluation(score_sum={self.score_sum}, questions={len(self.feedback)})"


class CodingEvaluator:
    """
    Scores coding questions one at a time.
    A failure on one question never affects the others.
    """

    def __init__(self, judge: CodeJudge):
        self.judge = judge

    def judge_solution(self, question: CodingQuestion, solution: str) -> dict:
        """
        One judge round-trip, validated.

        Raises:
            ExternalEvaluationError: call failed, timed out, or returned garbage
        """
        try:
            raw = self.judge.complete(build_evaluation_prompt(question, solution))
            return validate_verdict(extract_json(raw))
        except Exception as e:
            raise ExternalEvaluationError(str(e)) from e

    def evaluate_question(self, index: int, question: CodingQuestion,
                          solution: Optional[str]) -> Optional[CodingFeedback]:
        """
        Feedback for one question, or None when no solution was given.

        Empty solutions are skipped entirely: no judge call, no feedback entry,
        zero towards the coding score.
        """
        if not solution:
            return None

        try:
            verdict = self.judge_solution(question, solution)
        except ExternalEvaluationError as e:
            logger.warning("Evaluation of coding question %d failed, awarding partial credit: %s", index, e)
            return partial_credit_feedback(index)

        return CodingFeedback(
            question_index=index,
            feedback=verdict["feedback"],
            score=verdict["score"],
            passes_all_tests=verdict["passesAllTests"],
            performance=verdict["performance"],
            readability=verdict["readability"],
            correctness=verdict["correctness"],
            identified_issues=[IdentifiedIssue(**issue) for issue in verdict["identifiedIssues"]]
        )

    def evaluate(self, questions: Sequence[CodingQuestion], solutions: Sequence[str]) -> CodingEvaluation:
        """Evaluate question i against solutions[i]; missing solutions count as empty."""
        result = CodingEvaluation()
        for index, question in enumerate(questions):
            solution = solutions[index] if index < len(solutions) else None
            feedback = self.evaluate_question(index, question, solution)
            if feedback is None:
                continue
            result.score_sum += feedback.score
            result.feedback.append(feedback)
        return result


def review_code(judge: CodeJudge, code: str, question: str) -> str:
    """
    Free-text advisory review for the pre-submission helper.
    Not used for grading; failures propagate to the caller.
    """
    return judge.complete(REVIEW_PROMPT.format(question=question, code=code))
