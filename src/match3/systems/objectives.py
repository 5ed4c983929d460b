from __future__ import annotations

from collections import Counter

from esper import World

from match3.components.level import ClearColor, ClearObstacle, ReachScore
from match3.events.bus import EVENT_MATCH_CLEARED, EVENT_OBJECTIVE_PROGRESS, EventBus
from match3.systems.state_utils import get_objective_tracker


class ObjectiveSystem:
    """Feeds cleared cells, destroyed obstacles and score into level objectives."""

    def __init__(self, world: World, event_bus: EventBus) -> None:
        self.world = world
        self.event_bus = event_bus
        self.total_score = 0
        self.event_bus.subscribe(EVENT_MATCH_CLEARED, self.on_match_cleared)

    def on_match_cleared(self, sender, **kwargs):
        report = kwargs.get('report')
        if report is None:
            return
        self.total_score += report.score_delta
        tracker = get_objective_tracker(self.world)
        if tracker is None or not tracker.progress:
            return
        colors = Counter(color for _, _, color in report.cleared_cells if color is not None)
        obstacles = Counter(damage.kind for damage in report.obstacles_cleared if damage.destroyed)
        changed = False
        for entry in tracker.progress:
            if entry.completed:
                continue
            objective = entry.objective
            if isinstance(objective, ClearColor):
                value = entry.current + colors.get(objective.color, 0)
            elif isinstance(objective, ClearObstacle):
                value = entry.current + obstacles.get(objective.kind, 0)
            elif isinstance(objective, ReachScore):
                value = self.total_score
            else:
                continue
            value = min(value, entry.target)
            if value != entry.current:
                entry.current = value
                changed = True
            entry.completed = entry.current >= entry.target
        if changed:
            self.event_bus.emit(
                EVENT_OBJECTIVE_PROGRESS, progress=list(tracker.progress), all_complete=tracker.all_complete
            )
