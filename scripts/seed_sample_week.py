#!/usr/bin/env python3
"""
Sample Data Script

Loads one week of content and one task for a category so the portal can be
tried end to end. Existing (category, week) documents are replaced.

Usage: python scripts/seed_sample_week.py ["Dream Package"] [week]
"""
import sys
from datetime import datetime, timedelta, timezone

from placement_prep.db.mongodb import COLLECTIONS, get_collection, init_mongo_indexes
from placement_prep.models.records import Category, WeeklyContentRecord, WeeklyTaskRecord


def sample_content(category: str, week: int) -> WeeklyContentRecord:
    return WeeklyContentRecord(
        week=week,
        category=category,
        title=f"Week {week}: Arrays and Hashing",
        description="Core array techniques and hash-map patterns.",
        resources=[
            {"type": "video", "title": "Arrays crash course", "url": "https://example.com/arrays"},
            {"type": "notes", "title": "Hashing notes", "url": "https://example.com/hashing.pdf"},
            {"type": "link", "title": "Practice set", "url": "https://example.com/practice"}
        ]
    )


def sample_task(category: str, week: int) -> WeeklyTaskRecord:
    return WeeklyTaskRecord(
        week=week,
        category=category,
        title=f"Week {week} Assessment",
        description="Five minutes of MCQs and one coding problem.",
        deadline=datetime.now(timezone.utc) + timedelta(days=7),
        mcqs=[
            {"question": "Average lookup cost in a hash map?", "options": ["O(1)", "O(log n)", "O(n)"], "correctAnswer": 0},
            {"question": "Index of the last element of a list of length n?", "options": ["n", "n - 1", "n + 1"], "correctAnswer": 1}
        ],
        coding_questions=[
            {
                "question": "Two Sum",
                "description": "Return indices of the two numbers that add up to target.",
                "testCases": [
                    {"input": "[2,7,11,15], 9", "expectedOutput": "[0,1]"},
                    {"input": "[3,2,4], 6", "expectedOutput": "[1,2]"}
                ]
            }
        ]
    )


def main():
    category = sys.argv[1] if len(sys.argv) > 1 else Category.dream.value
    week = int(sys.argv[2]) if len(sys.argv) > 2 else 1
    if category not in [c.value for c in Category]:
        sys.exit(f"Unknown category: {category}")

    init_mongo_indexes()

    content = sample_content(category, week).model_dump(by_alias=True, exclude={"id"})
    get_collection(COLLECTIONS["weekly_content"]).replace_one(
        {"category": category, "week": week}, content, upsert=True
    )
    print(f"Content for {category} week {week} stored")

    task = sample_task(category, week).model_dump(by_alias=True, exclude={"id"})
    get_collection(COLLECTIONS["weekly_tasks"]).replace_one(
        {"category": category, "week": week}, task, upsert=True
    )
    print(f"Task for {category} week {week} stored")


if __name__ == "__main__":
    main()
