from typing import List, Optional

from referee.engine import ScoreEngine, build_snapshot
from referee.models import MatchConfig, MatchSnapshot, MatchState, PointEvent


def build_match_timeline(
    events: List[PointEvent],
    config: Optional[MatchConfig] = None,
) -> List[MatchSnapshot]:
    """
    Replays a match from scratch using the point events.
    Returns one snapshot after each point.
    Does NOT mutate external state.
    """

    config = config or MatchConfig()
    engine = ScoreEngine(config)
    state = MatchState()

    timeline: List[MatchSnapshot] = []
    last_timestamp = None

    for event in events:

        # Enforce monotonic timestamp
        if last_timestamp is not None and event.timestamp < last_timestamp:
            raise ValueError("Event timestamp must be non-decreasing")
        last_timestamp = event.timestamp

        update = engine.apply_point(state, event.winner)
        state = update.state

        timeline.append(
            build_snapshot(state, config, event.timestamp, message=update.message)
        )

        if state.is_finished:
            break

    return timeline
