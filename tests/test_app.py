from __future__ import annotations

import pytest
from textual.widgets import Static

from conftest import FakeProvider

from cdnscli.app import CdnsApp
from cdnscli.ui.model import Styles


async def settle(app, pilot) -> None:
    """Wait for background commands and the messages they dispatch."""
    for _ in range(5):
        await app.workers.wait_for_complete()
        await pilot.pause()


@pytest.mark.anyio
async def test_app_loads_zones_and_records(provider) -> None:
    app = CdnsApp(provider, client_timeout=2.0)
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)

        assert app.query_one("#view", Static) is not None
        assert [r[0] for r in app.model.zones_table.rows] == ["example.com", "test.com"]
        assert set(app.model.cache) == {"example.com", "test.com"}
        assert not app.model.loading
        assert app.model.width == 120
        assert ("list_zones",) in provider.calls


@pytest.mark.anyio
async def test_app_navigation_and_focus(provider) -> None:
    app = CdnsApp(provider)
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)

        await pilot.press("down", "enter")
        await settle(app, pilot)
        assert app.model.records_table.focused
        assert [r[0] for r in app.model.records_table.rows] == ["api"]

        await pilot.press("escape")
        await settle(app, pilot)
        assert app.model.zones_table.focused


@pytest.mark.anyio
async def test_app_create_record_flow(provider) -> None:
    app = CdnsApp(provider, styles=Styles(title="Test DNS CLI"))
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)

        await pilot.press("enter")
        await settle(app, pilot)
        await pilot.press("c")
        await settle(app, pilot)
        assert app.model.show_popup
        assert app.model.popup.title == "Resource record creation"

        await pilot.press("enter", "a", "p", "i", "enter", "ctrl+s")
        await settle(app, pilot)

        assert not app.model.show_popup
        assert [r.name for r in app.model.cache["example.com"]] == ["www", "mail", "api"]
        assert provider.calls[-1][0] == "add_rr"


@pytest.mark.anyio
async def test_app_tab_reaches_popup(provider) -> None:
    app = CdnsApp(provider)
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)
        await pilot.press("enter")
        await settle(app, pilot)
        await pilot.press("e", "tab", "tab")
        await settle(app, pilot)
        assert app.model.popup.cursor == 2


@pytest.mark.anyio
async def test_app_shows_provider_errors(zones, records) -> None:
    provider = FakeProvider(zones=zones, records=records, fail={"list_records"})
    app = CdnsApp(provider)
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)
        assert not app.model.loading
        assert app.model.status_line().startswith("Error: load records ")


@pytest.mark.anyio
@pytest.mark.parametrize("key", ["q", "ctrl+c"])
async def test_app_quit_keys(provider, key) -> None:
    app = CdnsApp(provider)
    exits = []
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)
        app.exit = lambda *args, **kwargs: exits.append(True)
        try:
            await pilot.press(key)
            await settle(app, pilot)
        finally:
            del app.exit
    assert exits == [True]


@pytest.mark.anyio
async def test_app_applies_ready_messages_before_next_key(provider) -> None:
    app = CdnsApp(provider)
    async with app.run_test(size=(120, 40)) as pilot:
        await settle(app, pilot)
        started = []
        app.run_model_command = started.append

        await pilot.press("enter")
        assert app.model.records_table.focused
        assert started == []

        # save then reopen straight away: the save must not close the new editor
        await pilot.press("e", "ctrl+s", "e")
        assert app.model.show_popup
        assert app.model.popup.active
        assert len(started) == 1
