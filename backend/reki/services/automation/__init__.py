from reki.services.automation.scenarios import apply_scenario_preset
from reki.services.automation.status import AutomationStatus, get_automation_status
from reki.services.automation.ticks import TickResult, run_busyness_tick, run_vibe_tick

__all__ = [
    "AutomationStatus",
    "TickResult",
    "apply_scenario_preset",
    "get_automation_status",
    "run_busyness_tick",
    "run_vibe_tick",
]
