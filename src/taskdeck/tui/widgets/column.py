"""SectionColumn widget: one board section and its cards."""

from __future__ import annotations

from typing import TYPE_CHECKING

from textual.containers import Container, ScrollableContainer, Vertical
from textual.widget import Widget
from textual.widgets import Label

from taskdeck.core.models.enums import DropTargetKind
from taskdeck.tui.widgets.card import TaskCard, dom_id

if TYPE_CHECKING:
    from textual.app import ComposeResult

    from taskdeck.core.models.entities import SectionWithTasks


class _NSLabel(Label):
    ALLOW_SELECT = False
    can_focus = False


class _NSVertical(Vertical):
    ALLOW_SELECT = False
    can_focus = False


class _NSScrollable(ScrollableContainer):
    ALLOW_SELECT = False
    can_focus = False


class _NSContainer(Container):
    ALLOW_SELECT = False
    can_focus = False


def _header_text(section: SectionWithTasks) -> str:
    return f"{section.name or 'Untitled'} ({len(section.tasks)})"


class SectionColumn(Widget):
    ALLOW_SELECT = False
    can_focus = False

    def __init__(self, section: SectionWithTasks, **kwargs) -> None:
        super().__init__(id=dom_id("section", section.id), **kwargs)
        self.section_id = section.id
        self._section = section

    @property
    def section(self) -> SectionWithTasks:
        return self._section

    def compose(self) -> ComposeResult:
        with _NSVertical():
            with _NSVertical(classes="column-header"):
                yield _NSLabel(_header_text(self._section), classes="column-header-text")
            with _NSScrollable(classes="column-content"):
                if self._section.tasks:
                    for task in self._section.tasks:
                        yield TaskCard(task)
                else:
                    with _NSContainer(classes="column-empty"):
                        yield _NSLabel("No tasks", classes="empty-message")

    def get_cards(self) -> list[TaskCard]:
        return list(self.query(TaskCard))

    def get_focused_card_index(self) -> int | None:
        for i, card in enumerate(self.get_cards()):
            if card.has_focus:
                return i
        return None

    def focus_card(self, index: int) -> bool:
        cards = self.get_cards()
        if not cards:
            return False
        cards[max(0, min(index, len(cards) - 1))].focus()
        return True

    async def update_section(self, section: SectionWithTasks) -> None:
        """Bring the column in line with ``section``.

        Cards are updated in place while the task order is unchanged; any
        change of membership or order rebuilds the card list.
        """
        self._section = section
        self.query_one(".column-header-text", _NSLabel).update(_header_text(section))

        cards = self.get_cards()
        if [card.task_id for card in cards] == [task.id for task in section.tasks]:
            for card, task in zip(cards, section.tasks, strict=True):
                if card.task_model != task:
                    card.task_model = task
            return

        content = self.query_one(".column-content", _NSScrollable)
        await content.remove_children()
        if section.tasks:
            await content.mount_all([TaskCard(task) for task in section.tasks])
        else:
            empty = _NSContainer(
                _NSLabel("No tasks", classes="empty-message"), classes="column-empty"
            )
            await content.mount(empty)


def drop_target_for(widget: Widget | None) -> tuple[str, DropTargetKind] | None:
    """Nearest card or section at or above ``widget`` in the DOM."""
    node = widget
    while node is not None:
        if isinstance(node, TaskCard):
            return node.task_id, DropTargetKind.TASK
        if isinstance(node, SectionColumn):
            return node.section_id, DropTargetKind.SECTION
        parent = node.parent
        node = parent if isinstance(parent, Widget) else None
    return None
