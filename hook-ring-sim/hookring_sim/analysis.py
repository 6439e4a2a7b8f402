"""Matplotlib analysis charts — capture maps, swing traces, preset capture rates."""

import os

import matplotlib
matplotlib.use("Agg")  # Non-interactive backend
import matplotlib.pyplot as plt
import numpy as np

from hookring.types import CapturedEvent, NudgeEvent, RingState
from hookring import config as cfg
from hookring import physics
from hookring.presets import DIFFICULTY_PRESETS, list_presets, preset_config


def _style_chart(ax, title):
    """Apply dark theme styling to chart."""
    ax.set_facecolor("#0f0f1a")
    ax.set_title(title, color="#e0e0e0", fontsize=13, fontweight="bold", pad=12)
    ax.tick_params(colors="#888888", labelsize=9)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    ax.spines["bottom"].set_color("#333333")
    ax.spines["left"].set_color("#333333")
    ax.xaxis.label.set_color("#aaaaaa")
    ax.yaxis.label.set_color("#aaaaaa")


def release_outcome(hold_angle: float, config: cfg.Config) -> int:
    """Frames until capture when released from ``hold_angle``, or -1 on a miss."""
    ring = RingState(
        angle=physics.clamp_swing(hold_angle),
        ang_vel=physics.release_velocity(physics.clamp_swing(hold_angle), config.release_scale),
    )
    states, events = physics.simulate_swing(ring, config)
    if any(isinstance(e, CapturedEvent) for e in events):
        return len(states) - 1
    return -1


def capture_map(hold_angles, release_scales, base: cfg.Config = cfg.DEFAULTS) -> np.ndarray:
    """Grid of frames-to-capture (rows: release scale, cols: hold angle); -1 is a miss."""
    grid = np.full((len(release_scales), len(hold_angles)), -1, dtype=int)
    for i, scale in enumerate(release_scales):
        config = cfg.update_config(base, release_scale=float(scale))
        for j, angle in enumerate(hold_angles):
            grid[i, j] = release_outcome(float(angle), config)
    return grid


def capture_rate(hold_angles, config: cfg.Config) -> float:
    """Fraction of ``hold_angles`` that end on the hook."""
    outcomes = np.array([release_outcome(float(a), config) for a in hold_angles])
    if outcomes.size == 0:
        return 0.0
    return float(np.mean(outcomes >= 0))


def chart_capture_map(base: cfg.Config = cfg.DEFAULTS, save_path=None):
    """Chart 1: Capture Map.

    Heatmap of frames-to-capture across hold angles and release scales.
    Misses are left dark.
    """
    hold_angles = np.linspace(-cfg.MAX_SWING, cfg.MAX_SWING, 63)
    scales = np.linspace(0.10, 0.45, 36)
    grid = capture_map(hold_angles, scales, base)
    masked = np.ma.masked_less(grid, 0)

    fig, ax = plt.subplots(figsize=(9, 5))
    fig.set_facecolor("#0f0f1a")
    _style_chart(ax, "Frames to Capture by Hold Angle and Release Scale")

    im = ax.imshow(
        masked, origin="lower", aspect="auto", cmap="viridis_r",
        extent=[hold_angles[0], hold_angles[-1], scales[0], scales[-1]],
    )
    ax.axhline(y=base.release_scale, color="#e94560", linestyle="--", linewidth=1.2, alpha=0.7)
    ax.axvline(x=base.hold_start_angle, color="#ffc107", linestyle="--", linewidth=1.2, alpha=0.7)
    ax.set_xlabel("Hold Angle (rad)")
    ax.set_ylabel("Release Scale")

    cbar = fig.colorbar(im, ax=ax, shrink=0.8)
    cbar.set_label("Frames", color="#aaa")
    cbar.ax.tick_params(colors="#888")

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, facecolor=fig.get_facecolor())
    return fig


def chart_swing_trace(hold_angles=(0.95, 0.6, -0.4), base: cfg.Config = cfg.DEFAULTS, save_path=None):
    """Chart 2: Swing Trace.

    Ring angle per frame after release, with the hook angle and capture points marked.
    """
    fig, ax = plt.subplots(figsize=(9, 5))
    fig.set_facecolor("#0f0f1a")
    _style_chart(ax, "Swing Trace After Release")

    colors = ["#4ecdc4", "#e94560", "#ffc107", "#28a745"]
    for hold, color in zip(hold_angles, colors):
        ring = RingState(angle=hold, ang_vel=physics.release_velocity(hold, base.release_scale))
        states, events = physics.simulate_swing(ring, base)
        angles = np.array([st.angle for st in states])
        ax.plot(np.arange(len(angles)), angles, color=color, linewidth=1.6, label=f"hold {hold:+.2f}")
        for e in events:
            frame = round(e.t / cfg.FRAME_TIME)
            if isinstance(e, CapturedEvent):
                ax.plot(frame, angles[-1], marker="*", markersize=14, color=color)
            elif isinstance(e, NudgeEvent):
                ax.plot(frame, angles[min(frame, len(angles) - 1)], marker=".", color="#aaaaaa")

    ax.axhline(y=base.hook_angle, color="#e0e0e0", linestyle="--", linewidth=1, alpha=0.6)
    ax.axhline(y=cfg.MAX_SWING, color="#dc3545", linestyle=":", linewidth=1, alpha=0.6)
    ax.axhline(y=-cfg.MAX_SWING, color="#dc3545", linestyle=":", linewidth=1, alpha=0.6)
    ax.set_xlabel("Frame")
    ax.set_ylabel("Angle (rad)")
    ax.legend(facecolor="#1a1a2e", edgecolor="#333", labelcolor="#e0e0e0", fontsize=9)
    ax.grid(True, alpha=0.15)

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, facecolor=fig.get_facecolor())
    return fig


def chart_preset_capture_rates(base: cfg.Config = cfg.DEFAULTS, save_path=None):
    """Chart 3: Capture Rate per Difficulty Preset over a sweep of hold angles."""
    hold_angles = np.linspace(-cfg.MAX_SWING, cfg.MAX_SWING, 125)
    keys = list_presets()
    rates = [capture_rate(hold_angles, preset_config(k, base)) * 100 for k in keys]

    fig, ax = plt.subplots(figsize=(7, 5))
    fig.set_facecolor("#0f0f1a")
    _style_chart(ax, "Capture Rate by Difficulty")

    colors = ["#28a745", "#ffc107", "#dc3545"]
    bars = ax.bar([DIFFICULTY_PRESETS[k]["label"] for k in keys], rates, color=colors[:len(keys)], alpha=0.85)
    for bar, rate in zip(bars, rates):
        ax.text(
            bar.get_x() + bar.get_width() / 2, bar.get_height() + 0.8,
            f"{rate:.0f}%", ha="center", va="bottom", fontsize=10, color="#aaa",
        )
    ax.set_ylabel("Hold angles that capture (%)")
    ax.set_ylim(0, 105)
    ax.grid(True, alpha=0.15, axis="y")

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, facecolor=fig.get_facecolor())
    return fig


def generate_all_charts(output_dir=".", base: cfg.Config = cfg.DEFAULTS):
    """Generate all analysis charts and save to output directory."""
    os.makedirs(output_dir, exist_ok=True)

    paths = []

    path = os.path.join(output_dir, "chart_capture_map.png")
    print("  Generating capture map (sweeping releases)...")
    chart_capture_map(base, save_path=path)
    paths.append(path)
    print(f"  Saved: {path}")

    path = os.path.join(output_dir, "chart_swing_trace.png")
    chart_swing_trace(base=base, save_path=path)
    paths.append(path)
    print(f"  Saved: {path}")

    path = os.path.join(output_dir, "chart_preset_capture_rates.png")
    chart_preset_capture_rates(base, save_path=path)
    paths.append(path)
    print(f"  Saved: {path}")

    plt.close("all")
    return paths
