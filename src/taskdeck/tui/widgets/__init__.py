from taskdeck.tui.widgets.card import TaskCard
from taskdeck.tui.widgets.column import SectionColumn

__all__ = ["SectionColumn", "TaskCard"]
