#!/usr/bin/env python3
"""
Selector state machine

Decides which listed entries go to the remover. Each state has one handler
that returns the next state, so every combination of the interactive, yes and
dry-run switches runs through named transitions:

    LISTED -> EMPTY_EXIT | DRY_RUN_EXIT | AWAITING_SELECTION | AWAITING_CONFIRMATION
    AWAITING_SELECTION -> EMPTY_EXIT | AWAITING_CONFIRMATION
    AWAITING_CONFIRMATION -> CONFIRMED | ABORTED

Only CONFIRMED hands entries to the remover. Dry-run never prompts.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from rich.markup import escape

from auxiliary import format_path_for_display
from console_ui import ConsoleUI
from disk_walker import Entry


class SelectorState(Enum):
    LISTED = "listed"
    DRY_RUN_EXIT = "dry_run_exit"
    EMPTY_EXIT = "empty_exit"
    AWAITING_SELECTION = "awaiting_selection"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    CONFIRMED = "confirmed"
    ABORTED = "aborted"


TERMINAL_STATES = frozenset(
    {SelectorState.DRY_RUN_EXIT, SelectorState.EMPTY_EXIT, SelectorState.CONFIRMED, SelectorState.ABORTED}
)


@dataclass
class SelectionOutcome:
    """Final state of a selection run and the entries chosen on the way"""

    state: SelectorState
    selected: list[Entry] = field(default_factory=list)
    trace: list[SelectorState] = field(default_factory=list)

    @property
    def confirmed(self) -> bool:
        return self.state is SelectorState.CONFIRMED


class Selector:
    """Runs the selection/confirmation flow for a list of candidate entries"""

    def __init__(
        self,
        ui: ConsoleUI,
        interactive: bool,
        assume_yes: bool,
        dry_run: bool,
        label: Callable[[Entry], str] = lambda e: str(e.path),
        prompt: str = "Select items to delete",
        question: str = "Delete selected items?",
    ):
        self.ui = ui
        self.interactive = interactive
        self.assume_yes = assume_yes
        self.dry_run = dry_run
        self.label = label
        self.prompt = prompt
        self.question = question

        self._candidates: list[Entry] = []
        self._selected: list[Entry] = []
        self._handlers = {
            SelectorState.LISTED: self._on_listed,
            SelectorState.AWAITING_SELECTION: self._on_awaiting_selection,
            SelectorState.AWAITING_CONFIRMATION: self._on_awaiting_confirmation,
        }

    def run(self, candidates: list[Entry]) -> SelectionOutcome:
        """Drive the state machine from LISTED to a terminal state"""
        self._candidates = list(candidates)
        self._selected = []

        state = SelectorState.LISTED
        trace = [state]
        while state not in TERMINAL_STATES:
            state = self._handlers[state]()
            trace.append(state)

        selected = self._selected if state in (SelectorState.CONFIRMED, SelectorState.DRY_RUN_EXIT) else []
        return SelectionOutcome(state=state, selected=list(selected), trace=trace)

    # -- transitions --------------------------------------------------------

    def _on_listed(self) -> SelectorState:
        if not self._candidates:
            return SelectorState.EMPTY_EXIT

        if self.dry_run:
            self._selected = list(self._candidates)
            self.ui.print_info("Would remove:")
            for entry in self._selected:
                self.ui.print_plain(f"- {escape(format_path_for_display(str(entry.path)))}")
            return SelectorState.DRY_RUN_EXIT

        if self.interactive:
            return SelectorState.AWAITING_SELECTION

        self._selected = list(self._candidates)
        return SelectorState.AWAITING_CONFIRMATION

    def _on_awaiting_selection(self) -> SelectorState:
        labels = [self.label(entry) for entry in self._candidates]
        indices = self.ui.select_indices(labels, self.prompt)
        # Set semantics: repeated indices select an entry once
        chosen = sorted({i for i in indices if 0 <= i < len(self._candidates)})
        if not chosen:
            return SelectorState.EMPTY_EXIT

        self._selected = [self._candidates[i] for i in chosen]
        return SelectorState.AWAITING_CONFIRMATION

    def _on_awaiting_confirmation(self) -> SelectorState:
        if self.assume_yes:
            return SelectorState.CONFIRMED

        if self.ui.confirm(self.question):
            return SelectorState.CONFIRMED

        self.ui.print_plain("Aborted.")
        return SelectorState.ABORTED
