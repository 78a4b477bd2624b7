import argparse

from referee.models import DeuceMode, MatchConfig, PointEvent, Rule66
from referee.timeline import build_match_timeline
from render.renderer import ScoreboardRenderer


def main():
    ap = argparse.ArgumentParser(description="Overlay a padel scoreboard onto a match video")
    ap.add_argument("--input", default="input.mp4")
    ap.add_argument("--output", default="output.mp4")
    ap.add_argument("--rule66", choices=[r.value for r in Rule66], default=Rule66.TIE_BREAK.value)
    ap.add_argument("--deuce-mode", choices=[d.value for d in DeuceMode], default=DeuceMode.IMMEDIATE_KILLER.value)
    args = ap.parse_args()

    events = [
        PointEvent("us", 3.0),
        PointEvent("them", 7.0),
        PointEvent("us", 11.0),
        PointEvent("us", 15.0),
        PointEvent("us", 19.0),
    ]

    config = MatchConfig(rule66=Rule66(args.rule66), deuce_mode=DeuceMode(args.deuce_mode))
    timeline = build_match_timeline(events, config)

    renderer = ScoreboardRenderer(
        input_path=args.input,
        output_path=args.output,
        timeline=timeline
    )

    frames = renderer.render()
    print(f"[render] frames={frames} points={len(timeline)} -> {args.output}")


if __name__ == "__main__":
    main()
