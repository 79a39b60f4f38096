"""Pytest fixtures.

The production API is replaced by an in-memory fake served through
httpx.MockTransport, so tools, verifiers and the project context run their
real HTTP code paths. The language model is a scripted fake and both stores
have in-memory stand-ins with the same resolution rules as the Postgres
versions.
"""

import itertools
import json
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from apps.core_api.auth import create_access_token
from apps.core_api.main import app
from slate_agents.executor import Executor
from slate_agents.models import (
    ChatMessage,
    ConfirmationRequest,
    ConfirmationStatus,
    PlannedAction,
)
from slate_agents.orchestrator import AgentOrchestrator
from slate_agents.planner import Planner
from slate_llm.client import LLMClient, LLMCompletion, LLMError, LLMToolCall
from slate_memory.exceptions import (
    ConfirmationAlreadyResolvedError,
    ConfirmationExpiredError,
    ConfirmationNotFoundError,
)
from slate_memory.stores import ConfirmationRecord
from slate_tools.adapters.production import ProductionClient, register_production_tools
from slate_tools.base import ToolContext
from slate_tools.registry import ToolRegistry

PROJECT_ID = "proj-1"
USER_ID = "user-1"
API_BASE = "http://production.test/api/v1"

_ENTITY_PREFIX = {
    "scenes": "scene",
    "cast-members": "cast",
    "locations": "loc",
    "shooting-days": "day",
    "elements": "elem",
    "crew-members": "crew",
}


# ============================================================================
# FAKE PRODUCTION API
# ============================================================================


class FakeProductionAPI:
    """In-memory production REST API, callable as an httpx.MockTransport handler.

    Knobs:
        outage: every request answers 503
        fail_after_mutations: answer 503 once this many writes have succeeded
        tamper: per-resource fields overwritten on create/update responses
        sticky_deletes: DELETE answers 200 but keeps the row
    """

    def __init__(self):
        self.entities: dict[tuple[str, str], list[dict[str, Any]]] = {}
        self.members: dict[str, set[str]] = {}
        self.day_scenes: dict[str, list[str]] = {}
        self.scene_cast: dict[str, list[str]] = {}
        self.requests: list[tuple[str, str, Any]] = []
        self.outage = False
        self.fail_after_mutations: int | None = None
        self.tamper: dict[str, dict[str, Any]] = {}
        self.sticky_deletes = False
        self._ids = itertools.count(100)

    # -- setup ---------------------------------------------------------------

    def add_member(self, project_id: str, user_id: str) -> None:
        self.members.setdefault(project_id, set()).add(user_id)

    def seed(self, project_id: str, resource: str, *rows: dict[str, Any]) -> None:
        self.entities.setdefault((project_id, resource), []).extend(dict(r) for r in rows)

    def rows(self, project_id: str, resource: str) -> list[dict[str, Any]]:
        return self.entities.setdefault((project_id, resource), [])

    @property
    def mutations(self) -> list[tuple[str, str, Any]]:
        return [r for r in self.requests if r[0] != "GET"]

    # -- transport -------------------------------------------------------------

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/api/v1").strip("/")
        payload = json.loads(request.content) if request.content else None
        self.requests.append((request.method, path, payload))

        if self.outage:
            return httpx.Response(503, json={"error": "Service unavailable"})
        if (
            request.method != "GET"
            and self.fail_after_mutations is not None
            and len(self.mutations) > self.fail_after_mutations
        ):
            return httpx.Response(503, json={"error": "Service unavailable"})

        parts = path.split("/")
        if len(parts) < 3 or parts[0] != "projects":
            return httpx.Response(404, json={"error": "Not found"})
        project_id, resource, rest = parts[1], parts[2], parts[3:]

        if resource == "members" and len(rest) == 1:
            if rest[0] in self.members.get(project_id, set()):
                return httpx.Response(200, json={"data": {"userId": rest[0], "role": "EDITOR"}})
            return httpx.Response(404, json={"error": "Not a member"})

        if resource not in _ENTITY_PREFIX:
            return httpx.Response(404, json={"error": "Not found"})

        if not rest:
            return self._collection(request.method, project_id, resource, payload)
        if len(rest) == 1:
            return self._item(request.method, project_id, resource, rest[0], payload)
        if len(rest) == 2:
            return self._relationship(project_id, resource, rest[0], rest[1], payload)
        return httpx.Response(404, json={"error": "Not found"})

    def _collection(self, method, project_id, resource, payload) -> httpx.Response:
        rows = self.rows(project_id, resource)
        if method == "GET":
            return httpx.Response(200, json={"data": rows})
        if method == "POST":
            entity = {"id": f"{_ENTITY_PREFIX[resource]}-{next(self._ids)}", **(payload or {})}
            rows.append(entity)
            return httpx.Response(201, json={"data": {**entity, **self.tamper.get(resource, {})}})
        return httpx.Response(405, json={"error": "Method not allowed"})

    def _item(self, method, project_id, resource, entity_id, payload) -> httpx.Response:
        rows = self.rows(project_id, resource)
        entity = next((r for r in rows if r["id"] == entity_id), None)
        if entity is None:
            return httpx.Response(404, json={"error": "Not found"})
        if method == "GET":
            return httpx.Response(200, json={"data": entity})
        if method == "PATCH":
            entity.update(payload or {})
            return httpx.Response(200, json={"data": {**entity, **self.tamper.get(resource, {})}})
        if method == "DELETE":
            if not self.sticky_deletes:
                rows.remove(entity)
            return httpx.Response(200, json={"data": {"id": entity_id}})
        return httpx.Response(405, json={"error": "Method not allowed"})

    def _relationship(self, project_id, resource, entity_id, child, payload) -> httpx.Response:
        payload = payload or {}
        if resource == "shooting-days" and child == "scenes":
            day_ok = any(d["id"] == entity_id for d in self.rows(project_id, "shooting-days"))
            scene_ok = any(s["id"] == payload.get("sceneId") for s in self.rows(project_id, "scenes"))
            if not (day_ok and scene_ok):
                return httpx.Response(404, json={"error": "Scene or shooting day not found"})
            self.day_scenes.setdefault(entity_id, []).append(payload["sceneId"])
            return httpx.Response(201, json={"data": {"shootingDayId": entity_id, **payload}})
        if resource == "scenes" and child == "cast":
            scene_ok = any(s["id"] == entity_id for s in self.rows(project_id, "scenes"))
            if not scene_ok:
                return httpx.Response(404, json={"error": "Scene not found"})
            self.scene_cast.setdefault(entity_id, []).append(payload.get("castMemberId"))
            return httpx.Response(201, json={"data": {"sceneId": entity_id, **payload}})
        return httpx.Response(404, json={"error": "Not found"})


# ============================================================================
# FAKE LANGUAGE MODEL
# ============================================================================


def tool_call(name: str, args: dict[str, Any] | None = None, call_id: str | None = None) -> LLMToolCall:
    return LLMToolCall(id=call_id or f"call_{name}", name=name, arguments=json.dumps(args or {}))


class ScriptedLLM(LLMClient):
    """Replays queued completions and records every request it receives."""

    def __init__(self, completions: list[LLMCompletion] | None = None, summary: str = "All done."):
        self.completions = list(completions or [])
        self.summary = summary
        self.summary_error: LLMError | None = None
        self.calls: list[dict[str, Any]] = []
        self.generate_calls: list[dict[str, Any]] = []

    def script(self, *completions: LLMCompletion) -> None:
        self.completions.extend(completions)

    async def complete_with_tools(
        self, messages, tools, system_prompt=None, temperature=0.7, max_tokens=2000, **kwargs
    ) -> LLMCompletion:
        self.calls.append(
            {"messages": list(messages), "tools": tools, "system_prompt": system_prompt}
        )
        if not self.completions:
            raise AssertionError("ScriptedLLM ran out of completions")
        completion = self.completions.pop(0)
        if isinstance(completion, Exception):
            raise completion
        return completion

    async def generate(
        self, prompt, system_prompt=None, temperature=0.7, max_tokens=2000, **kwargs
    ) -> str:
        self.generate_calls.append({"prompt": prompt, "system_prompt": system_prompt})
        if self.summary_error is not None:
            raise self.summary_error
        return self.summary

    @property
    def model_name(self) -> str:
        return "scripted"


# ============================================================================
# IN-MEMORY STORES
# ============================================================================


class InMemoryConfirmationStore:
    """Same contract as ConfirmationStore, held in a dict."""

    def __init__(self, ttl_seconds: int = 3600):
        self.ttl_seconds = ttl_seconds
        self.records: dict[str, ConfirmationRecord] = {}
        self._ids = itertools.count(1)
        self.sweeps = 0

    async def create(self, ctx: ToolContext, actions: list[PlannedAction]) -> ConfirmationRequest:
        now = datetime.now(timezone.utc)
        confirmation_id = f"conf-{next(self._ids)}"
        record = ConfirmationRecord(
            confirmation_id=confirmation_id,
            project_id=ctx.project_id,
            user_id=ctx.user_id,
            status=ConfirmationStatus.PENDING,
            actions=actions,
            created_at=now,
            expires_at=now + timedelta(seconds=self.ttl_seconds),
        )
        self.records[confirmation_id] = record
        return ConfirmationRequest(
            confirmation_id=confirmation_id, actions=actions, expires_at=record.expires_at
        )

    async def resolve(self, ctx: ToolContext, confirmation_id: str, approved: bool):
        now = datetime.now(timezone.utc)
        record = self.records.get(confirmation_id)
        if record is None or record.project_id != ctx.project_id or record.user_id != ctx.user_id:
            raise ConfirmationNotFoundError(confirmation_id)
        if record.status is ConfirmationStatus.PENDING and record.expires_at > now:
            record.status = ConfirmationStatus.APPROVED if approved else ConfirmationStatus.DECLINED
            record.resolved_at = now
            return list(record.actions)
        if record.status is ConfirmationStatus.PENDING:
            record.status = ConfirmationStatus.EXPIRED
            record.resolved_at = now
            raise ConfirmationExpiredError(confirmation_id)
        if record.status is ConfirmationStatus.EXPIRED:
            raise ConfirmationExpiredError(confirmation_id)
        raise ConfirmationAlreadyResolvedError(confirmation_id, record.status.value)

    async def expire_stale(self) -> int:
        self.sweeps += 1
        now = datetime.now(timezone.utc)
        count = 0
        for record in self.records.values():
            if record.status is ConfirmationStatus.PENDING and record.expires_at <= now:
                record.status = ConfirmationStatus.EXPIRED
                record.resolved_at = now
                count += 1
        return count

    async def get(self, confirmation_id: str) -> ConfirmationRecord | None:
        return self.records.get(confirmation_id)

    def backdate(self, confirmation_id: str) -> None:
        """Push a confirmation past its expiry."""
        self.records[confirmation_id].expires_at = datetime.now(timezone.utc) - timedelta(seconds=1)


class InMemoryMessageStore:
    """Same contract as ChatMessageStore, held in a list."""

    def __init__(self):
        self.messages: list[ChatMessage] = []
        self._ids = itertools.count(1)

    async def add(self, ctx: ToolContext, role: str, content: str, metadata=None) -> ChatMessage:
        message = ChatMessage(
            id=f"msg-{next(self._ids)}",
            project_id=ctx.project_id,
            user_id=ctx.user_id,
            role=role,
            content=content,
            metadata=metadata,
            created_at=datetime.now(timezone.utc),
        )
        self.messages.append(message)
        return message

    async def history(self, ctx: ToolContext, limit: int = 30) -> list[ChatMessage]:
        scoped = [
            m for m in self.messages if m.project_id == ctx.project_id and m.user_id == ctx.user_id
        ]
        return scoped[-limit:]


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def fake_api():
    """Production API seeded with one scene, one shooting day and one cast member."""
    api = FakeProductionAPI()
    api.add_member(PROJECT_ID, USER_ID)
    api.seed(
        PROJECT_ID,
        "scenes",
        {
            "id": "scene-1",
            "sceneNumber": "1",
            "intExt": "INT",
            "dayNight": "DAY",
            "setName": "KITCHEN",
            "pageCount": 1.5,
            "status": "NOT_SCHEDULED",
        },
    )
    api.seed(
        PROJECT_ID,
        "shooting-days",
        {"id": "day-1", "dayNumber": 1, "date": "2026-11-02", "status": "SCHEDULED"},
    )
    api.seed(
        PROJECT_ID,
        "cast-members",
        {"id": "cast-1", "characterName": "MAYA", "actorName": "Ana Ruiz", "workStatus": "CONFIRMED"},
    )
    return api


@pytest.fixture
def production(fake_api):
    return ProductionClient(base_url=API_BASE, transport=httpx.MockTransport(fake_api))


@pytest.fixture
def registry(production):
    registry = ToolRegistry()
    register_production_tools(registry, production)
    registry.freeze()
    return registry


@pytest.fixture
def ctx():
    return ToolContext(project_id=PROJECT_ID, user_id=USER_ID)


@pytest.fixture
def llm():
    return ScriptedLLM()


@pytest.fixture
def executor(registry):
    return Executor(registry)


@pytest.fixture
def planner(llm, registry, executor):
    return Planner(llm, registry, executor, max_iterations=4)


@pytest.fixture
def confirmation_store():
    return InMemoryConfirmationStore()


@pytest.fixture
def message_store():
    return InMemoryMessageStore()


@pytest.fixture
def orchestrator(planner, executor, confirmation_store, message_store, production, llm):
    return AgentOrchestrator(
        planner=planner,
        executor=executor,
        confirmations=confirmation_store,
        messages=message_store,
        production=production,
        llm=llm,
    )


@pytest.fixture
def client(orchestrator, confirmation_store, message_store, registry):
    """FastAPI test client wired to the in-memory agent (lifespan not run)."""
    app.state.tool_registry = registry
    app.state.orchestrator = orchestrator
    app.state.confirmation_store = confirmation_store
    app.state.message_store = message_store
    return TestClient(app)


@pytest.fixture
def auth_token():
    """Generate valid auth token for testing."""
    return create_access_token(USER_ID)


@pytest.fixture
def auth_headers(auth_token):
    """Generate auth headers with valid token."""
    return {"Authorization": f"Bearer {auth_token}"}
