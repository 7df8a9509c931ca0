from textual import on, work
from textual.app import ComposeResult
from textual.widgets import Button, Input, Label

from api.models import Category
from store.admin import CategoryDesk
from views.scr_admin_base import AdminDeskScreen


class AdminCategoriesScreen(AdminDeskScreen):
    COLUMNS = ("Name", "Description")
    SEARCH_PLACEHOLDER = "Search categories..."
    ITEM_NOUN = "category"

    def make_desk(self) -> CategoryDesk:
        return CategoryDesk(self.app.state.client)

    def on_mount(self) -> None:
        # a single kind of category, nothing to filter on
        self.query_one("#select-status").display = False

    def row(self, category: Category):
        return (category.name, category.description or "-")

    def detail_markdown(self, category: Category) -> str:
        return (
            f"### {category.name}\n\n"
            f"{category.description or '_No description._'}\n\n"
            f"ID: `{category.id}`"
        )

    def compose_actions(self) -> ComposeResult:
        yield Label("New Category")
        yield Input(placeholder="Name", id="input-cat-name")
        yield Input(placeholder="Description (optional)", id="input-cat-desc")
        yield Button("Create", id="btn-create", variant="success")

    @on(Button.Pressed, "#btn-create")
    @work(exclusive=True, group="admin-write")
    async def handle_create(self) -> None:
        name_input = self.query_one("#input-cat-name", Input)
        desc_input = self.query_one("#input-cat-desc", Input)
        if not name_input.value.strip():
            name_input.focus()
            name_input.add_class("-invalid")
            self.notify("Category name is required.", severity="error")
            return

        name = name_input.value.strip()
        await self.run_write(
            self.desk.create(name, desc_input.value),
            success=f"Category {name} created.",
        )
        if any(c.name == name for c in self.desk.items):
            name_input.remove_class("-invalid")
            name_input.value = ""
            desc_input.value = ""
