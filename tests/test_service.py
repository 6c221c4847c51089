from datetime import date

import pytest
from convex import ConvexError

from sitetrack_app.core.backend_client import BackendAPI
from sitetrack_app.core.config import BACKEND_FUNCTIONS
from sitetrack_app.core.service import ProjectService

TASKS = [
    {
        "_id": "t1",
        "identifier": "CON-1",
        "title": "Pour foundation",
        "status": {"_id": "s2", "name": "In Progress", "color": "#3B82F6", "iconName": "timer"},
        "priority": {"_id": "p1", "name": "High"},
        "assignee": {"_id": "u1", "name": "Alice"},
        "labels": [{"_id": "l1", "name": "concrete"}, {"_id": "l2", "name": "Ground"}],
        "projectId": "proj1",
        "createdAt": 1735725600000,  # 2025-01-01T10:00:00Z
        "dueDate": "2025-01-20",
    },
    {
        "_id": "t2",
        "identifier": "CON-2",
        "title": "Order rebar",
        "statusId": "s1",
        "projectId": "proj2",
        "createdAt": "2025-01-03T08:00:00Z",
    },
]

PROJECTS = [
    {"_id": "proj1", "name": "Tower A", "startDate": "2025-01-01", "targetDate": "2025-06-30", "contractValue": 1000},
    {"_id": "proj2", "name": "Warehouse"},
]


class DummyAPI(BackendAPI):
    def __init__(self, snapshots=None):
        self.deployment_url = "https://example.convex.cloud"
        self.snapshots = snapshots or {}
        self.queries = []
        self.mutations = []

    def subscribe(self, function_name, args=None):
        self.queries.append((function_name, args))
        return self.snapshots.get(function_name)

    def submit(self, function_name, args=None):
        self.mutations.append((function_name, args))
        return None

    def watch(self, function_name, args=None):
        self.queries.append((function_name, args))
        yield self.snapshots.get(function_name)


def _service(**extra):
    snapshots = {
        BACKEND_FUNCTIONS["tasks"]: TASKS,
        BACKEND_FUNCTIONS["projects"]: PROJECTS,
    }
    snapshots.update(extra)
    api = DummyAPI(snapshots)
    return ProjectService(api), api


def test_fetch_work_items_maps_documents():
    svc, _ = _service()
    items = svc.fetch_work_items()
    first, second = items
    assert first.identifier == "CON-1"
    assert first.status.name == "In Progress"
    assert first.priority.name == "High"
    assert first.assignee.name == "Alice"
    assert first.project.name == "Tower A"
    assert first.due_date == date(2025, 1, 20)
    assert first.created_at.year == 2025
    # a bare status id still places the item in its column
    assert second.status.id == "s1"
    assert second.project.name == "Warehouse"


def test_fetch_work_items_filters_by_project_and_reports_progress():
    svc, _ = _service()
    events = []
    items = svc.fetch_work_items("proj2", progress=lambda msg, cur, tot: events.append((msg, cur, tot)))
    assert [i.id for i in items] == ["t2"]
    assert ("Mapping tasks", 1, 1) in events


def test_fetch_work_items_frame_sorted_newest_first():
    svc, _ = _service()
    df = svc.fetch_work_items_frame()
    assert list(df["identifier"]) == ["CON-2", "CON-1"]
    assert df.set_index("id").loc["t1", "labels"] == "concrete, Ground"
    assert df.set_index("id").loc["t2", "assignee"] == "(Unassigned)"


def test_empty_snapshot_gives_empty_frame():
    svc, _ = _service(**{BACKEND_FUNCTIONS["tasks"]: None})
    assert svc.fetch_work_items() == []
    assert svc.fetch_work_items_frame().empty


def test_statuses_fall_back_to_defaults():
    svc, _ = _service()
    statuses = svc.get_statuses()
    assert [s.name for s in statuses] == ["To Do", "In Progress", "In Review", "Done"]


def test_update_task_status_sends_one_mutation():
    svc, api = _service()
    svc.update_task_status("t1", "s3")
    assert api.mutations == [(BACKEND_FUNCTIONS["update_status"], {"id": "t1", "statusId": "s3"})]


def test_metadata_getters_map_documents():
    svc, _ = _service(
        **{
            BACKEND_FUNCTIONS["priorities"]: [{"_id": "p1", "name": "Urgent", "level": 0}],
            BACKEND_FUNCTIONS["users"]: [{"_id": "u1", "email": "bob@example.com"}],
            BACKEND_FUNCTIONS["labels"]: [{"_id": "l1", "name": "concrete", "color": "#999"}],
        }
    )
    assert [(p.id, p.level) for p in svc.get_priorities()] == [("p1", 0)]
    assert [u.name for u in svc.get_users()] == ["bob@example.com"]
    assert [lbl.name for lbl in svc.get_labels()] == ["concrete"]


def test_update_priority_sends_one_mutation():
    svc, api = _service()
    svc.update_task_priority("t1", "p1")
    assert api.mutations == [(BACKEND_FUNCTIONS["update_priority"], {"id": "t1", "priorityId": "p1"})]


def test_refresh_work_items_reads_one_pushed_snapshot():
    svc, api = _service()
    assert svc.refresh_work_items() == 2
    assert api.queries == [(BACKEND_FUNCTIONS["tasks"], None)]


def test_update_assignee_can_clear():
    svc, api = _service()
    svc.update_task_assignee("t1", None)
    assert api.mutations == [(BACKEND_FUNCTIONS["update_assignee"], {"id": "t1"})]


def test_fetch_scheduled_tasks():
    project = dict(PROJECTS[0], tasks=[TASKS[0], dict(TASKS[1], projectId="proj1")])
    svc, api = _service(**{BACKEND_FUNCTIONS["project_with_tasks"]: project})
    tasks = svc.fetch_scheduled_tasks("proj1", today=date(2025, 2, 1))
    assert api.queries[-1] == (BACKEND_FUNCTIONS["project_with_tasks"], {"id": "proj1"})
    by_id = {t.id: t for t in tasks}
    assert (by_id["t1"].start, by_id["t1"].end) == (date(2025, 1, 1), date(2025, 1, 20))
    assert by_id["t1"].group == "In Progress"
    # no due date: default one-week bar
    assert (by_id["t2"].start, by_id["t2"].end) == (date(2025, 1, 3), date(2025, 1, 10))
    assert svc.fetch_project("proj1").target_date == date(2025, 6, 30)


def test_finance_fetches_pass_project_id():
    payments = [{"_id": "pay1", "projectId": "proj1", "type": "incoming", "amount": 10, "status": "confirmed"}]
    svc, api = _service(**{BACKEND_FUNCTIONS["payments"]: payments})
    df = svc.fetch_payments("proj1")
    assert list(df["amount"]) == [10.0]
    assert api.queries[-1] == (BACKEND_FUNCTIONS["payments"], {"projectId": "proj1"})
    assert svc.fetch_expenses("proj1").empty
    assert svc.fetch_budgets("proj1").empty


class FakeClient:
    def __init__(self, fail=False):
        self.fail = fail
        self.query_calls = 0
        self.pushed = []
        self.unsubscribed = False

    def query(self, name, args):
        self.query_calls += 1
        return [{"_id": "x"}]

    def mutation(self, name, args):
        if self.fail:
            raise ConvexError("nope", None)
        return "ok"

    def subscribe(self, name, args):
        return FakeSubscription(self)


class FakeSubscription:
    def __init__(self, client):
        self.client = client

    def __iter__(self):
        return iter(self.client.pushed)

    def unsubscribe(self):
        self.client.unsubscribed = True


def _api_with(client):
    api = BackendAPI.__new__(BackendAPI)
    api.deployment_url = "https://example.convex.cloud"
    api.client = client
    api._cache = {}
    api._cache_ttl = 60.0
    return api


def test_backend_caches_snapshots_until_mutation():
    client = FakeClient()
    api = _api_with(client)
    api.subscribe("tasks:getAll")
    api.subscribe("tasks:getAll")
    assert client.query_calls == 1
    assert api.submit("tasks:update", {"id": "1"}) == "ok"
    api.subscribe("tasks:getAll")
    assert client.query_calls == 2


def test_backend_wraps_mutation_errors_and_clears_cache():
    api = _api_with(FakeClient(fail=True))
    api.subscribe("tasks:getAll")
    with pytest.raises(RuntimeError) as excinfo:
        api.submit("tasks:update", {"id": "1"})
    assert isinstance(excinfo.value.__cause__, ConvexError)
    assert api._cache == {}


def test_watch_refreshes_cached_snapshot():
    client = FakeClient()
    client.pushed = [[{"_id": "a"}], [{"_id": "a"}, {"_id": "b"}]]
    api = _api_with(client)
    api.subscribe("tasks:getAll")
    seen = list(api.watch("tasks:getAll"))
    assert seen == client.pushed
    assert client.unsubscribed
    # the last pushed snapshot is served without another query
    assert api.subscribe("tasks:getAll") == [{"_id": "a"}, {"_id": "b"}]
    assert client.query_calls == 1


def test_closing_watch_ends_subscription():
    client = FakeClient()
    client.pushed = [[{"_id": "a"}], [{"_id": "b"}]]
    api = _api_with(client)
    stream = api.watch("tasks:getAll", {"projectId": "p"})
    assert next(stream) == [{"_id": "a"}]
    stream.close()
    assert client.unsubscribed
    assert api.subscribe("tasks:getAll", {"projectId": "p"}) == [{"_id": "a"}]
