from taskdeck.tui.modals.child_tasks import ChildTaskModal
from taskdeck.tui.modals.debug_log import DebugLogModal

__all__ = ["ChildTaskModal", "DebugLogModal"]
