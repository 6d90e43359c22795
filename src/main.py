# src/main.py
"""
Orbit View - Project Galaxy Viewer
==================================

Interactive window over a project snapshot: theme folders are galaxies,
projects orbit as planets and recurring tasks fly between them.

Controls:
    drag        orbit the camera around the current view
    wheel       zoom
    click       focus a galaxy, planet or mission
    H           back to the home view
    L           toggle labels
    F11         toggle fullscreen
    ESC         quit
"""

import argparse
import logging
import os
import sys

import pygame
from pygame.locals import DOUBLEBUF, FULLSCREEN, RESIZABLE

from orbit_viz.core.config import RENDER_CFG
from orbit_viz.core.log_config import configure_logging
from orbit_viz.core.logging_utils import SessionRecorder
from orbit_viz.core.timekeeping import FrameTimer
from orbit_viz.data.snapshots import SnapshotError, demo_snapshot, load_snapshot
from orbit_viz.render import AssetLibrary, SceneRenderer, draw_fps, draw_status, load_font
from orbit_viz.scene import HomeMode, InteractionCallbacks, Scene

logger = logging.getLogger("orbit_viz.main")

CURSORS = {
    "grab": pygame.SYSTEM_CURSOR_SIZEALL,
    "grabbing": pygame.SYSTEM_CURSOR_SIZEALL,
    "pointer": pygame.SYSTEM_CURSOR_HAND,
}


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Interactive orbital view of a project snapshot.")
    parser.add_argument("--snapshot", type=str, default=None, help="JSON snapshot (defaults to demo data)")
    parser.add_argument("--width", type=int, default=RENDER_CFG.width)
    parser.add_argument("--height", type=int, default=RENDER_CFG.height)
    parser.add_argument("--fullscreen", action="store_true")
    parser.add_argument("--fps", type=int, default=60, help="Frame cap, 0 for uncapped")
    parser.add_argument("--texture-size", type=int, default=256, help="Planet texture resolution")
    parser.add_argument(
        "--record",
        type=str,
        default=None,
        metavar="DIR",
        help="Write session CSVs under DIR (e.g. data/sessions)",
    )
    parser.add_argument("--log-level", type=str, default="INFO")
    parser.add_argument("--log-dir", type=str, default=None, help="Also write a rotating log file here")
    return parser.parse_args(argv)


def _set_display_mode(size, fullscreen: bool) -> pygame.Surface:
    if fullscreen:
        try:
            return pygame.display.set_mode((0, 0), FULLSCREEN | DOUBLEBUF)
        except pygame.error:
            logger.warning("Fullscreen unavailable, falling back to a window")
    return pygame.display.set_mode(size, RESIZABLE | DOUBLEBUF)


def _set_cursor(name: str) -> None:
    try:
        pygame.mouse.set_cursor(CURSORS.get(name, pygame.SYSTEM_CURSOR_ARROW))
    except pygame.error as exc:
        # headless drivers have no system cursors
        logger.debug("Cursor %r unavailable: %s", name, exc)


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        configure_logging(args.log_level, args.log_dir)
    except ValueError:
        print(f"Unknown log level: {args.log_level}", file=sys.stderr)
        return 2

    try:
        folders = load_snapshot(args.snapshot) if args.snapshot else demo_snapshot()
    except (OSError, SnapshotError) as exc:
        logger.error("Could not load snapshot: %s", exc)
        return 1

    pygame.init()
    pygame.display.set_caption("Orbit View")
    fullscreen = args.fullscreen
    screen = _set_display_mode((args.width, args.height), fullscreen)
    font_hud = load_font(["consolas", "dejavusansmono"], 16)
    font_fps = load_font(["consolas", "dejavusansmono"], 14)

    recorder = SessionRecorder(args.record) if args.record else None
    callbacks = InteractionCallbacks(
        on_indicator_click=lambda task: logger.info("Mission %s: %s", task.id, task.title),
        on_project_click=lambda project: logger.info("Planet %s: %s", project.id, project.name),
        on_theme_folder_click=lambda folder: logger.info("Galaxy %s: %s", folder.id, folder.name),
        on_home_click=lambda: logger.info("Home"),
    )
    scene = Scene(folders, callbacks, recorder=recorder, texture_size=args.texture_size)
    assets = AssetLibrary(scene.textures)
    assets.attach(scene.resources)
    renderer = SceneRenderer(screen.get_size(), assets)
    projection = renderer.projection

    clock = pygame.time.Clock()
    timer = FrameTimer()
    running = True
    try:
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_h:
                        scene.camera.disable_manual_control()
                        scene.camera.set_mode(HomeMode())
                    elif event.key == pygame.K_l:
                        renderer.show_labels = not renderer.show_labels
                    elif event.key == pygame.K_F11:
                        fullscreen = not fullscreen
                        screen = _set_display_mode((args.width, args.height), fullscreen)
                elif event.type == pygame.VIDEORESIZE and not fullscreen:
                    screen = pygame.display.set_mode(event.size, RESIZABLE | DOUBLEBUF)
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    scene.interaction.pointer_down(*event.pos)
                elif event.type == pygame.MOUSEMOTION:
                    scene.interaction.pointer_move(*event.pos, ray=projection.ray(*event.pos))
                    _set_cursor(scene.interaction.cursor)
                elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                    was_drag = scene.interaction.pointer_up()
                    if not was_drag:
                        scene.interaction.click(projection.ray(*event.pos))
                elif event.type == pygame.MOUSEWHEEL:
                    scene.interaction.wheel(event.y)

            scene.tick(timer.tick())
            projection = renderer.render(screen, scene)
            draw_status(screen, font_hud, scene)
            draw_fps(screen, font_fps, clock.get_fps())
            pygame.display.flip()
            clock.tick(args.fps)
    finally:
        released = scene.dispose()
        assets.clear()
        if recorder is not None:
            recorder.close()
            logger.info("Session written to %s", recorder.session_dir)
        logger.info("Released %d resources after %d frames", released, timer.frames)
        pygame.quit()
    return 0


if __name__ == "__main__":
    # headless runs (CI, screenshots) still need a video driver
    if os.environ.get("ORBIT_VIEW_HEADLESS"):
        os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        pygame.quit()
