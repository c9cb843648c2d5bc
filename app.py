"""Gradio wrapper to run Fang & Claw inside a Hugging Face Space."""

from __future__ import annotations

import os
import threading
import time
from typing import Optional, Tuple

# Ensure pygame can initialize without a physical display/audio device.
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import gradio as gr
import numpy as np
import pygame

import clawgame
from fangclaw.constants import HEIGHT, WIDTH
from fangclaw.events import GameSnapshot
from fangclaw.settings import Settings, configure_logging

NUDGE_SECONDS = 0.25


class GameSession:
    """Continuously runs the claw simulation and exposes helper controls."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or Settings()
        self.window = clawgame.ClawGameWindow(self.settings)
        self.lock = threading.Lock()
        self.paused = False
        self.running = True
        self.last_frame: Optional[np.ndarray] = None
        self.last_status: str = "Booting..."
        self.nudge_until = 0.0
        self._loop_thread = threading.Thread(target=self._loop, daemon=True)
        self._loop_thread.start()

    def _loop(self) -> None:
        while self.running:
            dt = self.window.clock.tick(self.settings.headless_fps) / 1000.0
            pygame.event.pump()
            with self.lock:
                if time.monotonic() >= self.nudge_until:
                    self.window.game.set_direction()
                if not self.paused:
                    self.window.update(dt)
                self.last_frame, self.last_status = self._render_locked()

    def _render_locked(self) -> Tuple[np.ndarray, str]:
        snap = self.window.render()
        pygame.display.flip()
        frame = pygame.surfarray.array3d(self.window.screen)
        frame = np.transpose(frame, (1, 0, 2))
        return frame, self._status_text(snap)

    def _status_text(self, snap: GameSnapshot) -> str:
        goal = f"Score {snap.score}/{snap.required_points}"
        powerups = ", ".join(sorted(snap.active_powerups)) or "none"
        state = "Paused" if self.paused else "Running"
        return (
            f"Level {snap.level} • {goal} • Total {snap.total_score}"
            f" • {snap.time_left:02d}s left • Power-ups: {powerups}"
            f" • Best {snap.high_score} • {state} ({snap.state})"
        )

    def get_frame(self) -> Tuple[np.ndarray, str]:
        with self.lock:
            if self.last_frame is None:
                self.last_frame, self.last_status = self._render_locked()
            return self.last_frame.copy(), self.last_status

    def toggle_pause(self) -> bool:
        with self.lock:
            self.paused = not self.paused
            self.last_frame, self.last_status = self._render_locked()
            return self.paused

    def command(self, action: str) -> None:
        with self.lock:
            game = self.window.game
            game.activate_audio()
            if action == "primary":
                game.press_primary()
            elif action in ("left", "right", "up", "down"):
                game.set_direction(**{action: True})
                self.nudge_until = time.monotonic() + NUDGE_SECONDS
            self.last_frame, self.last_status = self._render_locked()


session: Optional[GameSession] = None


def get_session() -> GameSession:
    global session
    if session is None:
        session = GameSession()
    return session


def startup() -> Tuple[np.ndarray, str]:
    return get_session().get_frame()


def refresh_view() -> Tuple[np.ndarray, str]:
    return get_session().get_frame()


def handle_primary() -> Tuple[np.ndarray, str]:
    get_session().command("primary")
    return get_session().get_frame()


def handle_direction(direction: str):
    def _handler() -> Tuple[np.ndarray, str]:
        get_session().command(direction)
        return get_session().get_frame()

    return _handler


def handle_pause_toggle() -> Tuple[np.ndarray, str, gr.Button]:
    paused = get_session().toggle_pause()
    frame, status = get_session().get_frame()
    label = "Resume Simulation" if paused else "Pause Simulation"
    return frame, status, gr.Button(value=label)


def build_demo() -> gr.Blocks:
    with gr.Blocks(title="Fang & Claw (Gradio)") as demo:
        gr.Markdown(
            """
            ### Fang & Claw · Hugging Face build
            - **Space** advances the story, opens/closes the claw and restarts after game over
            - Arrow buttons nudge the claw for a quarter second
            - Haul bats into the top band before opening the claw to bank them
            """
        )

        with gr.Row():
            game_image = gr.Image(
                label="Live View",
                type="numpy",
                height=HEIGHT,
                width=WIDTH,
            )
            with gr.Column():
                status_md = gr.Markdown("Loading...")
                primary_button = gr.Button("Space (Grab / Release / Advance)", variant="primary")
                with gr.Row():
                    left_button = gr.Button("◀")
                    up_button = gr.Button("▲")
                    down_button = gr.Button("▼")
                    right_button = gr.Button("▶")
                pause_button = gr.Button("Pause Simulation", variant="secondary")

        demo.load(fn=startup, inputs=None, outputs=[game_image, status_md])
        gr.Timer(0.2).tick(fn=refresh_view, inputs=None, outputs=[game_image, status_md])

        primary_button.click(fn=handle_primary, inputs=None, outputs=[game_image, status_md])
        for button, direction in (
            (left_button, "left"),
            (right_button, "right"),
            (up_button, "up"),
            (down_button, "down"),
        ):
            button.click(fn=handle_direction(direction), inputs=None, outputs=[game_image, status_md])
        pause_button.click(
            fn=handle_pause_toggle,
            inputs=None,
            outputs=[game_image, status_md, pause_button],
        )
    return demo


def main() -> None:
    settings = Settings()
    configure_logging(settings.log_level)
    build_demo().queue().launch(
        server_name="0.0.0.0",
        server_port=int(os.environ.get("PORT", 7860)),
    )


if __name__ == "__main__":
    main()
