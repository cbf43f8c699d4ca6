"""
Interactive menu — a finite state machine over the installer screens.

    MAIN ──i/Enter──▶ INSTALL ──a──▶ INSTALL_ALL
      │                 │  ◀──s───────┘
      u                 b ──▶ MAIN
      ▼
    UNINSTALL ──b──▶ MAIN

``q`` leads to DONE from every screen; picking a numbered entry runs
the install or uninstall and then leads to DONE. Unknown input keeps
the current state. The menu only renders and routes: installing and
uninstalling are delegated to the callables it is given.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from jlinstall.adapters.prompt import Prompter
from jlinstall.core.models.catalog import Catalog
from jlinstall.core.models.installation import InstalledVersion, InstallLayout
from jlinstall.core.models.release import Platform, ReleaseIdentifier
from jlinstall.core.services.installed import scan_installed

logger = logging.getLogger(__name__)


class MenuState(str, Enum):
    MAIN = "main"
    INSTALL = "install"
    INSTALL_ALL = "install_all"
    UNINSTALL = "uninstall"
    DONE = "done"


# (state, key) -> next state. Numbered selections are handled separately.
TRANSITIONS: dict[tuple[MenuState, str], MenuState] = {
    (MenuState.MAIN, "i"): MenuState.INSTALL,
    (MenuState.MAIN, ""): MenuState.INSTALL,
    (MenuState.MAIN, "u"): MenuState.UNINSTALL,
    (MenuState.MAIN, "q"): MenuState.DONE,
    (MenuState.INSTALL, "a"): MenuState.INSTALL_ALL,
    (MenuState.INSTALL, "b"): MenuState.MAIN,
    (MenuState.INSTALL, "q"): MenuState.DONE,
    (MenuState.INSTALL_ALL, "s"): MenuState.INSTALL,
    (MenuState.INSTALL_ALL, "b"): MenuState.MAIN,
    (MenuState.INSTALL_ALL, "q"): MenuState.DONE,
    (MenuState.UNINSTALL, "b"): MenuState.MAIN,
    (MenuState.UNINSTALL, "q"): MenuState.DONE,
}


@dataclass
class MenuOutcome:
    """What the session did before reaching DONE."""

    action: str | None = None
    result: Any = None

    def to_dict(self) -> dict[str, Any]:
        result = self.result.to_dict() if hasattr(self.result, "to_dict") else self.result
        return {"action": self.action, "result": result}


def select_index(answer: str, count: int) -> int | None:
    """Index for a numbered answer; Enter picks the first entry."""
    if count == 0:
        return None
    if answer == "":
        return 0
    if answer.isdigit() and 1 <= int(answer) <= count:
        return int(answer) - 1
    return None


class InteractiveMenu:
    """Drives the menu screens through a :class:`Prompter`."""

    def __init__(
        self,
        prompter: Prompter,
        layout: InstallLayout,
        *,
        load_catalog: Callable[[], Catalog],
        platform: Platform | None,
        install: Callable[[ReleaseIdentifier, Catalog], Any],
        uninstall: Callable[[str], Any],
    ):
        self.prompter = prompter
        self.layout = layout
        self.platform = platform
        self._load_catalog = load_catalog
        self._install = install
        self._uninstall = uninstall
        self._catalog: Catalog | None = None
        self.outcome = MenuOutcome()
        self._handlers: dict[MenuState, Callable[[], MenuState]] = {
            MenuState.MAIN: self._main,
            MenuState.INSTALL: lambda: self._install_screen(show_all=False),
            MenuState.INSTALL_ALL: lambda: self._install_screen(show_all=True),
            MenuState.UNINSTALL: self._uninstall_screen,
        }

    def run(self, start: MenuState = MenuState.MAIN) -> MenuOutcome:
        state = start
        while state is not MenuState.DONE:
            logger.debug("Menu state: %s", state.value)
            state = self._handlers[state]()
        return self.outcome

    @property
    def catalog(self) -> Catalog:
        if self._catalog is None:
            self._catalog = self._load_catalog()
        return self._catalog

    # ── Screens ─────────────────────────────────────────────────

    def _main(self) -> MenuState:
        say = self.prompter.say
        installed = scan_installed(self.layout)
        say()
        if not installed:
            say(
                f"ℹ No {self.layout.name} installation found in {self.layout.install_root}",
                fg="cyan",
            )
        else:
            say(
                f"{self.layout.name.capitalize()} installation found:"
                if len(installed) == 1
                else f"Multiple {self.layout.name.capitalize()} installations found:",
                bold=True,
            )
            for iv in installed:
                say(f"  {iv.name}")
        say()
        say("[i] Install")
        if installed:
            say("[u] Uninstall")
        say("[q] Quit")
        say()

        answer = self._ask("Select an option", "i")
        if answer == "u" and not installed:
            return self._invalid(MenuState.MAIN)
        return TRANSITIONS.get((MenuState.MAIN, answer)) or self._invalid(MenuState.MAIN)

    def _install_screen(self, show_all: bool) -> MenuState:
        state = MenuState.INSTALL_ALL if show_all else MenuState.INSTALL
        say = self.prompter.say
        # Without a known platform every option is "suggested".
        platform = None if show_all else self.platform
        options = self.catalog.require_options(platform)

        say()
        say(f"Install {self.layout.name.capitalize()}", bold=True)
        say()
        for i, ident in enumerate(options, 1):
            say(f"[{i}] {ident}")
        say()
        can_toggle = self.platform is not None
        if can_toggle and not show_all:
            say("[a] Show all install options")
        elif can_toggle and show_all:
            say("[s] Suggested install options")
        say("[b] Back to main menu")
        say("[q] Quit")
        say()

        answer = self._ask("Select an option", "1")
        index = select_index(answer, len(options))
        if index is not None:
            ident = options[index]
            self.outcome = MenuOutcome("install", self._install(ident, self.catalog))
            return MenuState.DONE
        if answer in ("a", "s") and not can_toggle:
            return self._invalid(state)
        return TRANSITIONS.get((state, answer)) or self._invalid(state)

    def _uninstall_screen(self) -> MenuState:
        say = self.prompter.say
        installed: list[InstalledVersion] = scan_installed(self.layout)

        say()
        say(f"Uninstall {self.layout.name.capitalize()}", bold=True)
        say()
        for i, iv in enumerate(installed, 1):
            say(f"[{i}] {iv.name}")
        say()
        say("[b] Back to main menu")
        say("[q] Quit")
        say()

        answer = self._ask("Select an option", "1")
        index = select_index(answer, len(installed))
        if index is not None:
            self.outcome = MenuOutcome("uninstall", self._uninstall(installed[index].name))
            return MenuState.DONE
        return TRANSITIONS.get((MenuState.UNINSTALL, answer)) or self._invalid(MenuState.UNINSTALL)

    # ── Helpers ─────────────────────────────────────────────────

    def _ask(self, text: str, shown_default: str) -> str:
        return self.prompter.prompt(f"{text} [{shown_default}]").strip().lower()

    def _invalid(self, state: MenuState) -> MenuState:
        self.prompter.say("⚠️  invalid input", fg="yellow")
        return state
