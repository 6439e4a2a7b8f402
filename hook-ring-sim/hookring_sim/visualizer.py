"""Pygame front end — draws the rig from snapshots and forwards player intents."""

import math

try:
    import pygame
except ImportError:
    pygame = None

from hookring.types import (
    READY,
    AttemptEndedEvent,
    CapturedEvent,
    GameWonEvent,
    MatchWonEvent,
    ScoredEvent,
    Vec2,
)
from hookring import config as cfg
from hookring import game, physics
from hookring.presets import DIFFICULTY_PRESETS, list_presets
from hookring_sim.audio import Beeper

HUD_H = 48
WIN_W = cfg.CANVAS_WIDTH
WIN_H = cfg.CANVAS_HEIGHT + HUD_H

# Colors
BG_COLOR = (255, 255, 255)
FLOOR_GRAY = (229, 231, 235)
WALL_GRAY = (229, 231, 235)
PLATE_GRAY = (156, 163, 175)
HOOK_BLACK = (17, 24, 39)
GUIDE_GRAY = (203, 213, 225)
ANCHOR_GRAY = (55, 65, 81)
ROPE_ORANGE = (245, 158, 11)
PERSON_GRAY = (75, 85, 99)
TEXT_DARK = (17, 24, 39)
TEXT_DIM = (107, 114, 128)
P1_COLOR = (78, 140, 196)
P2_COLOR = (233, 69, 96)

# Keyboard tuning: key -> (field, step)
TUNING_KEYS = {
    "up": ("hook_angle", 0.01),
    "down": ("hook_angle", -0.01),
    "right": ("capture_radius", 1),
    "left": ("capture_radius", -1),
    "]": ("release_scale", 0.01),
    "[": ("release_scale", -0.01),
}

MESSAGE_FRAMES = 150


def _pt(v: Vec2) -> tuple[int, int]:
    return int(round(v.x)), int(round(v.y + HUD_H))


def _draw_scene(surface, snap, config):
    surface.fill(BG_COLOR)
    pygame.draw.rect(surface, FLOOR_GRAY, (0, cfg.FLOOR_Y + HUD_H, WIN_W, WIN_H - cfg.FLOOR_Y - HUD_H))
    for x in (cfg.PLAY_LEFT, cfg.PLAY_RIGHT):
        pygame.draw.line(surface, WALL_GRAY, (int(x), HUD_H), (int(x), WIN_H), 2)

    # Hook: wall plate, stem toward the tip, and a J curl
    tip = _pt(snap.hook_tip)
    wall_x = int(cfg.PLAY_LEFT)
    pygame.draw.rect(surface, PLATE_GRAY, (wall_x - 12, tip[1] - 22, 12, 44))
    pygame.draw.line(surface, HOOK_BLACK, (wall_x, tip[1]), tip, 5)
    pygame.draw.arc(surface, HOOK_BLACK, (tip[0] - 12, tip[1] - 24, 24, 24), -math.pi / 2, math.pi / 2, 5)

    # Guide arc and the anchor eye
    anchor = _pt(snap.anchor)
    r = config.rope_length
    arc_rect = (anchor[0] - r, anchor[1] - r, 2 * r, 2 * r)
    # pygame arcs run counter-clockwise from +x; the swing is centred on straight down
    pygame.draw.arc(surface, GUIDE_GRAY, arc_rect, -math.pi / 2 - cfg.MAX_SWING, -math.pi / 2 + cfg.MAX_SWING, 1)
    pygame.draw.circle(surface, ANCHOR_GRAY, anchor, 6)

    _draw_person(surface, snap)

    ring = tip if snap.snapped else _pt(snap.ring_pos)
    pygame.draw.line(surface, ROPE_ORANGE, anchor, ring, 2)
    pygame.draw.circle(surface, HOOK_BLACK, ring, cfg.RING_RADIUS, 4)


def _draw_person(surface, snap):
    base_x = int(WIN_W * 0.93)
    base_y = cfg.FLOOR_Y + HUD_H
    pygame.draw.line(surface, PERSON_GRAY, (base_x, base_y), (base_x, base_y - 96), 3)
    pygame.draw.circle(surface, PERSON_GRAY, (base_x, base_y - 118), 12, 3)

    shoulder = (base_x - 2, base_y - 96)
    if snap.mode == READY:
        grip = _pt(snap.ring_pos)
        dx, dy = grip[0] - shoulder[0], grip[1] - shoulder[1]
        total = math.hypot(dx, dy) or 1
        elbow = (int(shoulder[0] + dx / total * 40), int(shoulder[1] + dy / total * 40))
        pygame.draw.lines(surface, PERSON_GRAY, False, [shoulder, elbow, grip], 3)
    else:
        pygame.draw.lines(surface, PERSON_GRAY, False, [
            shoulder, (shoulder[0] - 26, shoulder[1] - 18), (shoulder[0] - 56, shoulder[1] - 28),
        ], 3)


def _draw_hud(surface, font, font_sm, snap, state, message):
    pygame.draw.rect(surface, (249, 250, 251), (0, 0, WIN_W, HUD_H))
    if snap.mode == READY:
        deg, power = physics.aim_readout(snap.angle)
        aim = f"Angle {deg:4.0f}°  Power {power:3.0f}"
    else:
        aim = "Angle —  Power —"
    color = P1_COLOR if snap.server == 1 else P2_COLOR
    text = (f"P1 {snap.p1_points:2d} ({snap.p1_sets})   P2 {snap.p2_points:2d} ({snap.p2_sets})   "
            f"Target {state.target}  Best of {state.best_of}")
    surface.blit(font.render(text, True, TEXT_DARK), (12, 6))
    surface.blit(font.render(f"Turn: P{snap.server}", True, color), (12, 26))
    surface.blit(font_sm.render(f"Mode: {snap.mode.upper()}   {aim}", True, TEXT_DIM), (140, 30))
    if message:
        surface.blit(font.render(message, True, TEXT_DARK), (WIN_W - 12 - font.size(message)[0], 6))

    c = state.config
    lines = [
        f"hook {c.hook_angle:+.2f}  rope {c.rope_length:.0f}  inset {c.hook_inset:.0f}",
        f"capture {c.capture_radius:.0f}  gravity {c.gravity:.4f}  damping {c.damping:.4f}",
        f"release {c.release_scale:.2f}  hold {c.hold_start_angle:+.2f}",
        "R ready  SPACE release  X reset  1/2/3 preset  S save  D defaults",
        "arrows: hook angle / capture   [ ]: release scale",
    ]
    for i, line in enumerate(lines):
        surface.blit(font_sm.render(line, True, TEXT_DIM), (WIN_W - 330, HUD_H + 8 + i * 14))


def _describe(event) -> str:
    if isinstance(event, MatchWonEvent):
        return f"Match: Player {event.player} wins! Sets {event.p1_sets}-{event.p2_sets}"
    if isinstance(event, GameWonEvent):
        return f"Game to P{event.player} (sets {event.p1_sets}-{event.p2_sets})"
    if isinstance(event, ScoredEvent):
        return f"Point P{event.player}  {event.p1_points}-{event.p2_points}"
    if isinstance(event, AttemptEndedEvent) and event.reason != "captured":
        return f"P{event.player} missed ({event.reason})"
    return ""


def run_visualizer(config_path: str = None):
    """Launch the Pygame window. Configuration is loaded from and saved to ``config_path``."""
    if pygame is None:
        print("ERROR: pygame is not installed. Run: pip install pygame")
        return

    pygame.init()
    screen = pygame.display.set_mode((WIN_W, WIN_H))
    pygame.display.set_caption("Hook & Ring")
    clock = pygame.time.Clock()
    font = pygame.font.SysFont("monospace", 15, bold=True)
    font_sm = pygame.font.SysFont("monospace", 11)
    beeper = Beeper()

    config = cfg.load_config(config_path) if config_path else cfg.DEFAULTS
    state = game.ready(game.create_game(config))  # auto-arm the first throw
    presets = list_presets()
    message, message_left = "", 0

    running = True
    while running:
        clock.tick(60)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                state = game.begin_drag(state, Vec2(event.pos[0], event.pos[1] - HUD_H))
            elif event.type == pygame.MOUSEMOTION:
                state = game.move_drag(state, Vec2(event.pos[0], event.pos[1] - HUD_H))
            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                state = game.end_drag(state)
            elif event.type == pygame.KEYDOWN:
                name = pygame.key.name(event.key)
                if event.key == pygame.K_ESCAPE or name == "q":
                    running = False
                elif event.key == pygame.K_SPACE:
                    state = game.release(state)
                elif name == "r":
                    state = game.ready(state)
                elif name == "x":
                    state = game.reset(state)
                elif name in ("1", "2", "3"):
                    key = presets[int(name) - 1]
                    state = game.apply_preset(state, key)
                    message, message_left = f"Preset: {DIFFICULTY_PRESETS[key]['label']}", MESSAGE_FRAMES
                elif name == "d":
                    state = game.replace_configuration(state, cfg.DEFAULTS)
                    message, message_left = "Defaults", MESSAGE_FRAMES
                elif name == "s" and config_path:
                    try:
                        cfg.save_config(state.config, config_path)
                        message = "Saved"
                    except OSError as exc:
                        message = f"Save failed: {exc.strerror}"
                    message_left = MESSAGE_FRAMES
                elif name in TUNING_KEYS:
                    field_name, step = TUNING_KEYS[name]
                    value = getattr(state.config, field_name) + step
                    state = game.set_configuration(state, **{field_name: value})

        state, events = game.tick(state)
        beeper.play_events(events)
        for e in events:
            text = _describe(e)
            if text:
                message, message_left = text, MESSAGE_FRAMES
            if isinstance(e, CapturedEvent):
                message, message_left = f"P{e.player} hooked it!", MESSAGE_FRAMES

        message_left = max(0, message_left - 1)
        snap = game.snapshot(state)
        _draw_scene(screen, snap, state.config)
        _draw_hud(screen, font, font_sm, snap, state, message if message_left else "")
        pygame.display.flip()

    pygame.quit()
