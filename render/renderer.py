import cv2
import numpy as np
from typing import List

from referee.config import TEAM_NAMES
from referee.engine import build_snapshot
from referee.models import MatchConfig, MatchSnapshot, MatchState

BLUE = (235, 130, 59)
RED = (68, 68, 239)
WHITE = (255, 255, 255)
YELLOW = (11, 158, 245)


class ScoreboardRenderer:

    def __init__(self, input_path: str, output_path: str, timeline: List[MatchSnapshot]):
        self.input_path = input_path
        self.output_path = output_path
        self.timeline = timeline

        if not self.timeline:
            raise ValueError("Timeline cannot be empty")

    def render(self) -> int:

        cap = cv2.VideoCapture(self.input_path)

        if not cap.isOpened():
            raise RuntimeError("Cannot open input video")

        fps = cap.get(cv2.CAP_PROP_FPS)
        width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))

        fourcc = cv2.VideoWriter_fourcc(*"mp4v")
        out = cv2.VideoWriter(self.output_path, fourcc, fps, (width, height))

        frame_count = 0

        while True:
            ret, frame = cap.read()
            if not ret:
                break

            current_time = frame_count / fps
            draw_scoreboard(frame, snapshot_at(self.timeline, current_time))

            out.write(frame)
            frame_count += 1

        cap.release()
        out.release()

        return frame_count


def snapshot_at(timeline: List[MatchSnapshot], t: float) -> MatchSnapshot:
    """Latest snapshot whose timestamp is <= t, a 0-0 board before the first point."""
    if t < timeline[0].timestamp:
        return build_snapshot(MatchState(), MatchConfig(), t)

    index = 0
    while index + 1 < len(timeline) and t >= timeline[index + 1].timestamp:
        index += 1
    return timeline[index]


# ----------------------------------------------------
# DRAWING
# ----------------------------------------------------

def draw_scoreboard(frame: np.ndarray, state: MatchSnapshot) -> np.ndarray:

    height, width = frame.shape[:2]

    scoreboard_width = 320
    scoreboard_height = 110

    margin = 20

    # bottom-right corner
    x1 = max(width - scoreboard_width - margin, 0)
    y1 = max(height - scoreboard_height - margin, 0)
    x2 = width - margin
    y2 = height - margin

    # background box
    overlay = frame.copy()
    cv2.rectangle(overlay, (x1, y1), (x2, y2), (0, 0, 0), -1)
    alpha = 0.6
    cv2.addWeighted(overlay, alpha, frame, 1 - alpha, 0, frame)

    font = cv2.FONT_HERSHEY_SIMPLEX

    rows = [
        (TEAM_NAMES["us"].upper(), state.games_us, state.points_us, BLUE, y1 + 30),
        (TEAM_NAMES["them"].upper(), state.games_them, state.points_them, RED, y1 + 60),
    ]

    for name, games, points, colour, y in rows:
        cv2.putText(frame, name, (x1 + 15, y), font, 0.6, colour, 2)
        cv2.putText(frame, str(games), (x2 - 120, y), font, 0.7, WHITE, 2)
        cv2.putText(frame, points, (x2 - 60, y), font, 0.9, WHITE, 2)

    # Completed sets
    history = " ".join(f"{us}-{them}" for us, them in state.set_history)
    set_text = f"Sets: {state.sets_us} - {state.sets_them}  {history}".rstrip()
    cv2.putText(frame, set_text, (x1 + 15, y1 + 90), font, 0.5, WHITE, 1)

    if state.is_finished:
        winner_text = f"Winner: {TEAM_NAMES[state.winner]}"
        cv2.putText(frame, winner_text, (x1 + 15, y1 - 10), font, 0.7, (0, 255, 0), 2)
    elif state.is_killer_point:
        cv2.putText(frame, "KILLER POINT", (x1 + 15, y1 - 10), font, 0.7, YELLOW, 2)
    elif state.is_tie_break:
        cv2.putText(frame, "TIE-BREAK", (x1 + 15, y1 - 10), font, 0.7, YELLOW, 2)

    return frame
