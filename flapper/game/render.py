# flapper/game/render.py
from __future__ import annotations
from typing import Optional
import pygame
from .config import (
    WIDTH, HEIGHT, GROUND_HEIGHT, PIPE_WIDTH,
    COLOR_SKY, COLOR_GROUND, COLOR_GRASS, COLOR_PIPE, COLOR_PIPE_EDGE,
    COLOR_ACTOR, COLOR_AUTOPILOT, COLOR_DANGER, COLOR_FG
)
from .session import Phase, RenderSnapshot


def actor_rect(snap: RenderSnapshot) -> pygame.Rect:
    a = snap.actor
    return pygame.Rect(int(a.x), int(a.y), int(a.width), int(a.height))


def draw_world(surf: pygame.Surface, snap: RenderSnapshot):
    """Sky, pipes, ground and actor. Reads the snapshot only."""
    surf.fill(COLOR_SKY)

    ground_y = HEIGHT - GROUND_HEIGHT
    for ob in snap.obstacles:
        x = int(ob.world_x)
        top = pygame.Rect(x, 0, PIPE_WIDTH, int(ob.gap_top))
        bot = pygame.Rect(x, int(ob.gap_bottom), PIPE_WIDTH, max(0, ground_y - int(ob.gap_bottom)))
        for r in (top, bot):
            pygame.draw.rect(surf, COLOR_PIPE, r)
            pygame.draw.rect(surf, COLOR_PIPE_EDGE, r, width=2)

    pygame.draw.rect(surf, COLOR_GROUND, pygame.Rect(0, ground_y, WIDTH, GROUND_HEIGHT))
    pygame.draw.rect(surf, COLOR_GRASS, pygame.Rect(0, ground_y, WIDTH, 20))

    if snap.phase == Phase.GAME_OVER:
        color = COLOR_DANGER
    elif snap.autopilot.active:
        color = COLOR_AUTOPILOT
    else:
        color = COLOR_ACTOR

    # tilt the actor box by its rotation (display only)
    r = actor_rect(snap)
    body = pygame.Surface(r.size, pygame.SRCALPHA)
    body.fill(color)
    body = pygame.transform.rotate(body, -snap.actor.rotation)
    surf.blit(body, body.get_rect(center=r.center))


def draw_hud(surf: pygame.Surface, snap: RenderSnapshot, font: pygame.font.Font,
             rank: Optional[int] = None):
    lines = [f"Score: {snap.score}   Best: {snap.high_score}"]
    if snap.autopilot.active:
        lines.append(f"AUTOPILOT {snap.autopilot.remaining}")
    if snap.phase == Phase.START:
        lines.append("ENTER to start")
    elif snap.phase == Phase.READY:
        lines.append(f"{snap.player_name}: SPACE to flap")
    elif snap.phase == Phase.GAME_OVER:
        lines.append(f"GAME OVER ({snap.death_cause})")
        if rank is not None:
            lines.append(f"Rank #{rank}")
        lines.append("ENTER to restart")

    for i, msg in enumerate(lines):
        surf.blit(font.render(msg, True, COLOR_FG), (12, 10 + i * 22))
