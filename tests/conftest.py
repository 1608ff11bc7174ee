import copy
import re
from datetime import datetime, timedelta, timezone

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo.errors import DuplicateKeyError

from placement_prep.core.auth import create_access_token
from placement_prep.main import app
from placement_prep.services.llm_client import get_code_judge
from placement_prep.services.mongo_service import PersistenceGateway, get_gateway


# ============================================================
# In-memory stand-in for a pymongo Collection
# ============================================================

_MISSING = object()


def _get_path(doc, path):
    value = doc
    for part in path.split("."):
        if isinstance(value, dict) and part in value:
            value = value[part]
        else:
            return _MISSING
    return value


def _parent(doc, path, create=True):
    parts = path.split(".")
    node = doc
    for part in parts[:-1]:
        if part not in node or not isinstance(node[part], dict):
            if not create:
                return None, parts[-1]
            node[part] = {}
        node = node[part]
    return node, parts[-1]


def _equals(value, expected):
    if value is _MISSING:
        return expected is None
    if value == expected:
        return True
    return isinstance(value, list) and not isinstance(expected, list) and expected in value


def _matches(doc, flt):
    for key, cond in flt.items():
        if key == "$or":
            if not any(_matches(doc, sub) for sub in cond):
                return False
            continue
        value = _get_path(doc, key)
        if isinstance(cond, dict) and cond and all(k.startswith("$") for k in cond):
            for op, arg in cond.items():
                if op == "$ne":
                    if _equals(value, arg):
                        return False
                elif op == "$regex":
                    flags = re.IGNORECASE if "i" in cond.get("$options", "") else 0
                    if not isinstance(value, str) or not re.search(arg, value, flags):
                        return False
                elif op == "$options":
                    continue
                else:
                    raise NotImplementedError(op)
        elif not _equals(value, cond):
            return False
    return True


def _apply_update(doc, update):
    for op, fields in update.items():
        for path, arg in fields.items():
            if op == "$set":
                parent, leaf = _parent(doc, path)
                parent[leaf] = copy.deepcopy(arg)
            elif op == "$unset":
                parent, leaf = _parent(doc, path, create=False)
                if parent is not None:
                    parent.pop(leaf, None)
            elif op == "$inc":
                parent, leaf = _parent(doc, path)
                parent[leaf] = parent.get(leaf, 0) + arg
            elif op == "$addToSet":
                parent, leaf = _parent(doc, path)
                items = parent.setdefault(leaf, [])
                if arg not in items:
                    items.append(arg)
            elif op == "$pull":
                parent, leaf = _parent(doc, path, create=False)
                if parent is not None and isinstance(parent.get(leaf), list):
                    parent[leaf] = [item for item in parent[leaf] if item != arg]
            else:
                raise NotImplementedError(op)


class Result:
    def __init__(self, inserted_id=None, matched_count=0, modified_count=0):
        self.inserted_id = inserted_id
        self.matched_count = matched_count
        self.modified_count = modified_count


class FakeCursor:
    def __init__(self, docs):
        self._docs = docs

    def sort(self, key, direction=1):
        self._docs.sort(key=lambda d: _get_path(d, key), reverse=direction < 0)
        return self

    def __iter__(self):
        return iter(self._docs)


class FakeCollection:
    """Enough of pymongo's Collection for the portal's services."""

    def __init__(self, unique=()):
        self.docs = []
        self.unique = unique
        self.calls = []

    def _find_doc(self, flt):
        for doc in self.docs:
            if _matches(doc, flt):
                return doc
        return None

    def insert_one(self, doc):
        self.calls.append("insert_one")
        doc = copy.deepcopy(doc)
        doc.setdefault("_id", ObjectId())
        if self.unique and any(
            all(existing.get(k) == doc.get(k) for k in self.unique) for existing in self.docs
        ):
            raise DuplicateKeyError("duplicate key")
        self.docs.append(doc)
        return Result(inserted_id=doc["_id"])

    def find_one(self, flt=None, sort=None):
        self.calls.append("find_one")
        doc = self._find_doc(flt or {})
        return copy.deepcopy(doc) if doc is not None else None

    def find(self, flt=None):
        self.calls.append("find")
        return FakeCursor([copy.deepcopy(d) for d in self.docs if _matches(d, flt or {})])

    def update_one(self, flt, update, upsert=False):
        self.calls.append("update_one")
        doc = self._find_doc(flt)
        if doc is None:
            return Result()
        before = copy.deepcopy(doc)
        _apply_update(doc, update)
        return Result(matched_count=1, modified_count=int(before != doc))

    def find_one_and_update(self, flt, update, return_document=False):
        self.calls.append("find_one_and_update")
        doc = self._find_doc(flt)
        if doc is None:
            return None
        before = copy.deepcopy(doc)
        _apply_update(doc, update)
        return copy.deepcopy(doc if return_document else before)

    def create_index(self, *args, **kwargs):
        return "index"


class ScriptedJudge:
    """Returns queued responses in order; queued exceptions are raised."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.prompts = []

    def complete(self, prompt):
        self.prompts.append(prompt)
        if not self.responses:
            raise RuntimeError("judge has no scripted response")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def verdict(score, passes=True, feedback="Looks right"):
    return (
        '{"score": %s, "feedback": "%s", "passesAllTests": %s, "performance": 80, '
        '"readability": 70, "correctness": 90, "identifiedIssues": []}'
        % (score, feedback, "true" if passes else "false")
    )


# ============================================================
# Fixtures
# ============================================================

@pytest.fixture
def collections():
    return {
        "users": FakeCollection(unique=("email",)),
        "weekly_content": FakeCollection(),
        "weekly_tasks": FakeCollection(),
        "submissions": FakeCollection(unique=("studentId", "taskId")),
        "experiences": FakeCollection()
    }


@pytest.fixture
def gateway(collections):
    return PersistenceGateway.from_collections(collections)


@pytest.fixture
def judge():
    return ScriptedJudge()


@pytest.fixture
def client(gateway, judge):
    app.dependency_overrides[get_gateway] = lambda: gateway
    app.dependency_overrides[get_code_judge] = lambda: judge
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_student(gateway):
    def _make(category="Dream Package", email="student@example.com", name="Asha Rao"):
        return gateway.users.insert({
            "role": "student",
            "name": name,
            "email": email,
            "password": "not-a-real-hash",
            "rollNumber": "22CSE1234",
            "branch": "CSE",
            "school": "SCOPE",
            "cgpa": "8.7",
            "category": category
        })
    return _make


@pytest.fixture
def make_alumni(gateway):
    def _make(email="alumni@example.com", name="Ravi Kumar"):
        return gateway.users.insert({
            "role": "alumni",
            "name": name,
            "email": email,
            "password": "not-a-real-hash",
            "company": "Acme",
            "position": "SDE",
            "graduationYear": 2020
        })
    return _make


@pytest.fixture
def make_task(collections):
    def _make(category="Dream Package", week=1, deadline=None, coding_questions=1):
        doc = {
            "week": week,
            "category": category,
            "title": f"Week {week} Assessment",
            "description": "MCQs and coding",
            "deadline": deadline or datetime.now(timezone.utc) + timedelta(days=3),
            "mcqs": [
                {"question": "Q1", "options": ["a", "b", "c"], "correctAnswer": 1},
                {"question": "Q2", "options": ["a", "b"], "correctAnswer": 0}
            ],
            "codingQuestions": [
                {
                    "question": f"Problem {i}",
                    "description": "Return the answer",
                    "testCases": [{"input": "1", "expectedOutput": "1"}]
                }
                for i in range(coding_questions)
            ]
        }
        return str(collections["weekly_tasks"].insert_one(doc).inserted_id)
    return _make


@pytest.fixture
def make_content(collections):
    def _make(category="Dream Package", week=1, resources=3):
        doc = {
            "week": week,
            "category": category,
            "title": f"Week {week}",
            "description": "Reading",
            "resources": [
                {"type": "video", "title": f"Resource {i}", "url": f"https://example.com/{i}"}
                for i in range(resources)
            ]
        }
        return str(collections["weekly_content"].insert_one(doc).inserted_id)
    return _make


def auth_header(user_id, role):
    token = create_access_token({"sub": user_id, "role": role})
    return {"Authorization": f"Bearer {token}"}
