from typing import Any, Awaitable, List, Optional, Sequence, Tuple

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Input, Label, MarkdownViewer, Select

from api.errors import ApiError
from store.admin import ALL, AdminCollection
from views.base_screen import BaseScreen
from views.modal_dialog import AlertModal, DialogModal


class AdminDeskScreen(BaseScreen):
    """
    Shared layout of the admin screens: search and status filter on top,
    the collection in a table, the highlighted item's detail and actions below.

    Subclasses provide make_desk, COLUMNS, STATUS_OPTIONS, row, detail_markdown
    and optionally compose_actions / on_item_selected.
    Every write goes through run_write, which shows failures in a dialog
    and redraws from the refetched collection.
    """

    BINDINGS = [
        Binding("ctrl+r", "reload", "Reload", show=True),
        Binding("delete", "delete_selected", "Delete", show=True),
    ]

    COLUMNS: Sequence[str] = ()
    STATUS_OPTIONS: Sequence[Tuple[str, str]] = (("All", ALL),)
    SEARCH_PLACEHOLDER = "Search..."
    ITEM_NOUN = "item"

    def __init__(self) -> None:
        super().__init__()
        self.desk: AdminCollection = self.make_desk()
        self._visible: List[Any] = []

    def make_desk(self) -> AdminCollection:
        raise NotImplementedError

    def row(self, item) -> Sequence[Any]:
        raise NotImplementedError

    def detail_markdown(self, item) -> str:
        raise NotImplementedError

    def compose_actions(self) -> ComposeResult:
        yield from ()

    def on_item_selected(self, item) -> None:
        pass

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Horizontal(id="hort-filters"):
            yield Input(id="input-search", placeholder=self.SEARCH_PLACEHOLDER)
            yield Select(
                list(self.STATUS_OPTIONS),
                value=ALL,
                allow_blank=False,
                id="select-status",
            )
        yield Label("", id="label-results")
        yield DataTable(id="table-items")
        with Horizontal(id="hort-detail"):
            yield MarkdownViewer(id="md-detail", show_table_of_contents=False)
            with Vertical(id="div-actions"):
                yield from self.compose_actions()
                yield Button("Delete", id="btn-delete", variant="error")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns(*self.COLUMNS)

    @on(ScreenResume)
    def handle_resume(self) -> None:
        self.action_reload()

    def action_reload(self) -> None:
        self.reload()

    @work(exclusive=True, group="admin-load")
    async def reload(self) -> None:
        self.query_one("#label-results", Label).update("Loading...")
        try:
            await self.desk.refresh()
        except ApiError as e:
            self.query_one("#label-results", Label).update("Could not load data.")
            await self.app.push_screen_wait(AlertModal(str(e)))
            return
        self.render_items()

    @on(Input.Changed, "#input-search")
    @on(Select.Changed, "#select-status")
    def handle_filter_change(self) -> None:
        if self.desk.loaded:
            self.render_items()

    def render_items(self) -> None:
        query = self.query_one("#input-search", Input).value
        status = self.query_one("#select-status", Select).value
        self._visible = self.desk.filter(query, status)

        table = self.query_one(DataTable)
        table.clear()
        for item in self._visible:
            table.add_row(*self.row(item), key=self.desk.key(item))

        self.query_one("#label-results", Label).update(
            f"{len(self._visible)} of {len(self.desk.items)} shown"
        )

        # keep the open detail on the same item when it is still visible
        selected = self.desk.selected
        keys = [self.desk.key(i) for i in self._visible]
        if selected is not None and self.desk.key(selected) in keys:
            table.move_cursor(row=keys.index(self.desk.key(selected)))
        self.render_detail()

    @on(DataTable.RowHighlighted)
    def handle_row_highlight(self, event: DataTable.RowHighlighted) -> None:
        self.desk.select(event.row_key.value)
        self.render_detail()

    def render_detail(self) -> None:
        item = self.desk.selected
        md = (
            self.detail_markdown(item)
            if item is not None
            else f"### Select a {self.ITEM_NOUN} to view its details."
        )
        self.query_one("#md-detail", MarkdownViewer).document.update(md)
        self.query_one("#btn-delete", Button).disabled = item is None
        if item is not None:
            self.on_item_selected(item)

    async def run_write(self, call: Awaitable[Any], success: str = "") -> Optional[Any]:
        """Awaits a desk write. Failures leave the collection as it was."""
        try:
            result = await call
        except ApiError as e:
            await self.app.push_screen_wait(AlertModal(str(e)))
            return None
        except ValueError as e:
            self.notify(str(e), severity="error")
            return None
        if success:
            self.notify(success)
        self.render_items()
        return result

    def describe(self, item) -> str:
        return getattr(item, "name", None) or self.desk.key(item)

    def action_delete_selected(self) -> None:
        self.handle_delete()

    @on(Button.Pressed, "#btn-delete")
    @work(exclusive=True, group="admin-write")
    async def handle_delete(self) -> None:
        item = self.desk.selected
        if item is None:
            return

        async def confirm() -> bool:
            return await self.app.push_screen_wait(
                DialogModal(
                    f"Delete {self.ITEM_NOUN} {self.describe(item)}? "
                    "This cannot be undone.",
                    primary_text="Delete",
                    secondary_text="Cancel",
                    tone="error",
                )
            )

        if await self.run_write(self.desk.delete(self.desk.key(item), confirm)):
            self.notify(f"{self.ITEM_NOUN.capitalize()} deleted.")
