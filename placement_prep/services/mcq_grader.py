"""
MCQ grading - deterministic, positional, one point per correct answer.
"""
from typing import Optional, Sequence

from placement_prep.models.records import MCQQuestion


def grade_mcqs(answers: Sequence[Optional[int]], questions: Sequence[MCQQuestion]) -> int:
    """
    Count positions where the submitted index equals the question's correct answer.

    Question i is graded against answers[i]. A missing answer (short list or
    None) is simply wrong; extra answers beyond the question list are ignored.
    """
    score = 0
    for index, question in enumerate(questions):
        if index < len(answers) and answers[index] is not None and answers[index] == question.correct_answer:
            score += 1
    return score
