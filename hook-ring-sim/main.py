#!/usr/bin/env python3
"""CLI entry point for the Hook & Ring simulation.

Usage:
    python main.py play              Launch Pygame game window
    python main.py match [a1] [a2]   Replay a scripted match (hold angles per player)
    python main.py sweep             Print which hold angles land on the hook per preset
    python main.py analyze           Generate analysis charts
    python main.py config [preset]   Show the saved configuration, or save a preset
    python main.py test              Run all tests
    python main.py demo              Sweep, scripted match, and charts
"""

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

CONFIG_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "hookring_config.json")


def _parse_angles(arg, default):
    if not arg:
        return default
    try:
        return [float(a) for a in arg.split(",")]
    except ValueError:
        print(f"  Ignoring bad angle list {arg!r}, using {default}")
        return default


def cmd_play():
    """Launch the Pygame game window."""
    print("Launching Hook & Ring...")
    print("Controls: R=ready  drag ring=aim  SPACE=release  X=reset  1/2/3=preset  S=save  Q=quit")
    print("-" * 60)
    from hookring_sim.visualizer import run_visualizer
    run_visualizer(config_path=CONFIG_PATH)


def cmd_match():
    """Replay a scripted match in text mode and print stats."""
    from hookring import config as cfg
    from hookring.game import play_match
    from hookring.types import GameWonEvent, MatchWonEvent

    print("=" * 60)
    print("  SCRIPTED HOOK & RING MATCH")
    print("=" * 60)

    p1_angles = _parse_angles(sys.argv[2] if len(sys.argv) > 2 else None, [0.95])
    p2_angles = _parse_angles(sys.argv[3] if len(sys.argv) > 3 else None, [0.95, 0.0])
    config = cfg.load_config(CONFIG_PATH)

    print(f"\n  P1 hold angles: {p1_angles}")
    print(f"  P2 hold angles: {p2_angles}")
    print(f"  Target {cfg.TARGET}, best of {cfg.BEST_OF}\n")

    result = play_match(p1_angles, p2_angles, config=config)
    s = result.stats

    for i, a in enumerate(result.attempts):
        p1, p2, sets1, sets2 = a.score
        print(f"  Attempt {i+1:3d}: P{a.player} hold {a.hold_angle:+.2f} -> {a.reason:8s} "
              f"({a.frames:3d} frames)  [{p1}-{p2}] sets {sets1}-{sets2}")
        for e in a.events:
            if isinstance(e, GameWonEvent):
                print(f"             GAME to P{e.player}  sets {e.p1_sets}-{e.p2_sets}")
            elif isinstance(e, MatchWonEvent):
                print(f"             MATCH to P{e.player}  sets {e.p1_sets}-{e.p2_sets}")

    print()
    if result.winner:
        print(f"  WINNER: Player {result.winner}  (sets {result.p1_sets}-{result.p2_sets})")
    else:
        print(f"  No winner after {s['total_attempts']} attempts  (sets {result.p1_sets}-{result.p2_sets})")
    print()
    print(f"  Total attempts: {s['total_attempts']}")
    print(f"  Avg attempt length: {s['avg_attempt_frames']} frames")
    print(f"  P1 captures: {s['p1_captures']}/{s['p1_attempts']}  |  "
          f"P2 captures: {s['p2_captures']}/{s['p2_attempts']}")
    print(f"  Attempt outcomes: {dict(sorted(s['reasons'].items(), key=lambda x: -x[1]))}")
    print()
    print("  Usage: python main.py match [p1_angles] [p2_angles]   e.g. 0.95 0.95,0.2")
    print("=" * 60)


def cmd_sweep():
    """Print which hold angles land on the hook for each difficulty preset."""
    import numpy as np
    from hookring import config as cfg
    from hookring.presets import DIFFICULTY_PRESETS, list_presets, preset_config
    from hookring_sim.analysis import release_outcome

    base = cfg.load_config(CONFIG_PATH)
    hold_angles = np.round(np.arange(-1.5, 1.51, 0.1), 2)

    for key in list_presets():
        config = preset_config(key, base)
        outcomes = [release_outcome(float(a), config) for a in hold_angles]
        hits = sum(1 for o in outcomes if o >= 0)
        print(f"Preset: {DIFFICULTY_PRESETS[key]['label']}  "
              f"(capture {config.capture_radius:.0f}, release {config.release_scale:.2f}, "
              f"gravity {config.gravity:.4f})")
        print(f"  Captures: {hits}/{len(hold_angles)}")
        for angle, frames in zip(hold_angles, outcomes):
            marker = "***" if frames >= 0 else "   "
            result = f"hooked in {frames:3d} frames" if frames >= 0 else "miss"
            print(f"  {marker} hold {angle:+.2f}  {result}")
        print()


def cmd_analyze():
    """Generate all analysis charts."""
    print("Generating analysis charts...")
    print("-" * 60)
    from hookring import config as cfg
    from hookring_sim.analysis import generate_all_charts
    output_dir = os.path.join(os.path.dirname(__file__), "output")
    paths = generate_all_charts(output_dir=output_dir, base=cfg.load_config(CONFIG_PATH))
    print(f"\nDone! {len(paths)} charts saved to {output_dir}/")


def cmd_config():
    """Show the saved configuration, or save a difficulty preset over it."""
    from hookring import config as cfg
    from hookring.presets import list_presets, preset_config

    config = cfg.load_config(CONFIG_PATH)
    if len(sys.argv) > 2:
        key = sys.argv[2]
        if key == "defaults":
            config = cfg.DEFAULTS
        elif key in list_presets():
            config = preset_config(key, config)
        else:
            print(f"Unknown preset {key!r}. Choose from: defaults, " + ", ".join(list_presets()))
            sys.exit(1)
        try:
            cfg.save_config(config, CONFIG_PATH)
        except OSError as exc:
            print(f"Could not save {CONFIG_PATH}: {exc.strerror}")
            sys.exit(1)
        print(f"Saved: {CONFIG_PATH}")

    print(f"Configuration ({cfg.STORAGE_KEY}):")
    for name, value in config.to_dict().items():
        print(f"  {name:18s} {value}")


def cmd_test():
    """Run all tests."""
    import subprocess
    print("Running tests...")
    print("-" * 60)
    result = subprocess.run(
        [sys.executable, "-m", "pytest", "tests/", "-v"],
        cwd=os.path.dirname(os.path.abspath(__file__)),
    )
    sys.exit(result.returncode)


def cmd_demo():
    """Sweep every preset, replay a scripted match, and generate charts."""
    print("=" * 60)
    print("  HOOK & RING — SIMULATION DEMO")
    print("=" * 60)
    print()

    cmd_sweep()

    print("-" * 60)
    cmd_match()

    print("-" * 60)
    cmd_analyze()

    print()
    print("=" * 60)
    print("  Demo complete! Check the 'output' folder for charts.")
    print("=" * 60)


COMMANDS = {
    "play": cmd_play,
    "match": cmd_match,
    "sweep": cmd_sweep,
    "analyze": cmd_analyze,
    "config": cmd_config,
    "test": cmd_test,
    "demo": cmd_demo,
}


def main():
    if len(sys.argv) < 2 or sys.argv[1] not in COMMANDS:
        print(__doc__)
        print("Available commands:")
        for name, func in COMMANDS.items():
            print(f"  {name:12s} {func.__doc__}")
        sys.exit(1)

    COMMANDS[sys.argv[1]]()


if __name__ == "__main__":
    main()
