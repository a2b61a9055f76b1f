import pytest

from collabrixo.models import Meeting, TimelineEvent, WorkItem
from collabrixo.services.changes import ChangeEvent
from collabrixo.services.forms import WorkItemForm
from collabrixo.services.views import BoardView, ListView, ViewState, assignee_summary

pytestmark = pytest.mark.anyio

CHANNEL = "databases.db.collections.components.documents"


def add_item(fake, name, status="todo", assignee="Ada", difficulty="medium"):
    return fake.add_document(
        "components", name=name, assignee=assignee, status=status, difficulty=difficulty, description=""
    )


async def test_view_starts_loading_then_ready(store, fake):
    add_item(fake, "Navbar")
    view = BoardView(store, "components")

    assert view.state is ViewState.LOADING
    await view.open()

    assert view.state is ViewState.READY
    assert [item.name for item in view.items] == ["Navbar"]


async def test_fetch_failure_sets_error_state(store, fake):
    fake.fail[("GET", "/documents")] = 500
    view = ListView(store, "timeline", TimelineEvent, error_message="Failed to load timeline events.")

    await view.open()

    assert view.state is ViewState.ERROR
    assert view.snapshot() == {"state": "error", "message": "Failed to load timeline events."}


async def test_live_view_refetches_on_change_and_renders_full_list(store, fake, feed):
    add_item(fake, "Navbar")
    rendered = []
    view = BoardView(store, "components", live=True, on_render=rendered.append)
    await view.open()

    add_item(fake, "Footer")
    add_item(fake, "Sidebar", status="done")
    delivered = await feed.publish(ChangeEvent(CHANNEL, ["databases.db.collections.components.documents.x.create"]))

    assert delivered == 1
    assert view.fetches == 2
    latest = rendered[-1]
    assert [card["name"] for card in latest["columns"]["todo"]] == ["Footer", "Navbar"]
    assert [card["name"] for card in latest["columns"]["done"]] == ["Sidebar"]


async def test_close_unsubscribes(store, fake, feed):
    view = BoardView(store, "components", live=True)
    await view.open()
    assert feed.listeners(CHANNEL) == 1

    await view.close()

    assert feed.listeners(CHANNEL) == 0
    assert not view.opened


async def test_results_arriving_after_close_are_dropped(store, fake):
    add_item(fake, "Navbar")
    rendered = []
    view = BoardView(store, "components", on_render=rendered.append)
    fetch = store.list

    async def fetch_then_close(*args, **kwargs):
        documents = await fetch(*args, **kwargs)
        await view.close()
        return documents

    store.list = fetch_then_close
    state = await view.refresh()

    assert state is ViewState.LOADING
    assert view.items == []
    assert rendered == []


async def test_edited_status_moves_card_between_columns(store, fake):
    created = await WorkItemForm(store, "components").submit(
        {"name": "Design login", "assignee": "Ada", "difficulty": "hard", "status": "todo"}
    )
    item = created.document
    await WorkItemForm(store, "components", initial=item).submit(
        {**item.to_fields(), "status": "done"}
    )

    view = BoardView(store, "components")
    await view.open()
    columns = view.columns()

    assert [i.id for i in columns["done"]] == [item.id]
    assert columns["todo"] == []


async def test_null_text_attributes_do_not_break_the_board(store, fake):
    fake.add_document("components", name="Navbar", status="todo", difficulty="easy", description=None, assignee=None)
    add_item(fake, "Footer")
    view = BoardView(store, "components")

    await view.open()

    assert view.state is ViewState.READY
    assert {item.name: item.description for item in view.items} == {"Navbar": "", "Footer": ""}


async def test_meetings_are_ordered_by_date_desc(store, fake):
    for day in ("2024-05-01", "2024-06-01", "2024-04-01"):
        fake.add_document(
            "meetings",
            date=f"{day}T10:00:00Z",
            agenda="Sprint review and planning",
            meetLink="https://meet.example.com/abc",
        )
    view = ListView(store, "meetings", Meeting, order_by="date")

    await view.open()

    assert [m.date.month for m in view.items] == [6, 5, 4]


async def test_decorate_adds_fields_per_item(store, fake):
    add_item(fake, "Navbar")
    view = BoardView(store, "components", decorate=lambda item: {"imageUrl": None})

    await view.open()

    assert view.snapshot()["columns"]["todo"][0]["imageUrl"] is None


async def test_async_render_callback_is_awaited(store, fake):
    seen = []

    async def render(snapshot):
        seen.append(snapshot["state"])

    await ListView(store, "timeline", TimelineEvent, on_render=render).open()

    assert seen == ["ready"]


def test_assignee_summary_counts_progress_and_difficulty(fake):
    items = [
        WorkItem.model_validate(add_item(fake, "A", status="done", difficulty="easy")),
        WorkItem.model_validate(add_item(fake, "B", status="todo", difficulty="hard")),
        WorkItem.model_validate(add_item(fake, "C", status="done", assignee="Grace")),
    ]

    summary = assignee_summary(items)

    assert summary[0] == {
        "assignee": "Ada",
        "total": 2,
        "completed": 1,
        "progress": 50.0,
        "difficulty": {"easy": 1, "medium": 0, "hard": 1},
    }
    assert summary[1]["assignee"] == "Grace"
    assert summary[1]["progress"] == 100.0
