# flapper/game/game.py
import sys, argparse, logging
import pygame
from pygame import K_SPACE, K_UP, K_ESCAPE, K_RETURN
from .config import WIDTH, HEIGHT, FPS, SEED_DEFAULT, STORE_PATH_DEFAULT
from .leaderboard import JsonFileStore, LeaderboardStore
from .render import draw_world, draw_hud
from .session import GameSession, InvalidPlayerName, Phase

logger = logging.getLogger(__name__)


def parse_args():
    p = argparse.ArgumentParser()
    p.add_argument("--name", type=str, default="",
                   help="Player name for the leaderboard.")
    p.add_argument("--seed", type=int, default=None,
                   help="Obstacle seed. Omit for SEED_DEFAULT, use -1 for random each launch.")
    p.add_argument("--store", type=str, default=STORE_PATH_DEFAULT,
                   help="JSON file holding the leaderboard and high score.")
    p.add_argument("--verbose", action="store_true", help="Debug logging (cues, spawns).")
    return p.parse_args()


def run():
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    # Resolve seed: None -> use SEED_DEFAULT; -1 -> random
    if args.seed is None:
        launch_seed = SEED_DEFAULT
    elif args.seed == -1:
        launch_seed = None
    else:
        launch_seed = args.seed

    leaderboard = LeaderboardStore(JsonFileStore(args.store))
    session = GameSession(leaderboard=leaderboard, seed=launch_seed)
    # audio layer is out of scope: cues are only logged
    session.add_cue_listener(lambda cue: logger.debug(f"cue: {cue}"))

    pygame.init()
    pygame.display.set_caption("Flapper")
    screen = pygame.display.set_mode((WIDTH, HEIGHT))
    clock = pygame.time.Clock()
    font = pygame.font.SysFont("couriernew", 20, bold=True)

    player_name = args.name

    while True:
        clock.tick(FPS)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                pygame.quit(); sys.exit()
            if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                session.flap()
            if event.type != pygame.KEYDOWN:
                continue
            if event.key == K_ESCAPE:
                pygame.quit(); sys.exit()
            if event.key in (K_SPACE, K_UP):
                session.flap()
            elif event.key == K_RETURN:
                if session.phase == Phase.START:
                    try:
                        session.start_session(player_name)
                    except InvalidPlayerName:
                        # no prompt widget here: fall back to a default name
                        logger.warning("No --name given, playing as PLAYER")
                        player_name = "PLAYER"
                        session.start_session(player_name)
                elif session.phase == Phase.GAME_OVER:
                    session.restart()
            elif event.unicode and event.unicode.isalpha():
                session.cheat_key(event.unicode)

        session.tick()

        # --- Render ---
        snap = session.snapshot()
        rank = leaderboard.rank_of(snap.player_name) if snap.phase == Phase.GAME_OVER else None
        draw_world(screen, snap)
        draw_hud(screen, snap, font, rank=rank)
        pygame.display.flip()


if __name__ == "__main__":
    run()
