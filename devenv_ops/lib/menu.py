"""Numbered interactive menus and selection prompts."""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from rich.console import Console
from rich.markup import escape

from .exceptions import DevEnvError, InvalidSelectionError
from .logging_config import LOGGER

ReadLine = Callable[[str], str]

CANCEL_TOKEN = "q"


class MenuState(Enum):
    """Menu loop states."""

    DISPLAYING = "displaying"
    AWAITING_INPUT = "awaiting_input"
    DISPATCHING = "dispatching"
    EXITED = "exited"


@dataclass
class MenuOption:
    """One numbered entry of a menu."""

    label: str
    action: Callable[[], None] | None = None
    exits: bool = False


class Menu:
    """Display -> read one line -> dispatch loop.

    Bad input is forgiven: an unknown choice prints an error and the menu is
    shown again. A DevEnvError raised by an action is explained and the menu is
    shown again. Only an exit option or end of input leaves the loop.
    """

    def __init__(
        self,
        title: str,
        options: Sequence[MenuOption],
        console: Console | None = None,
        read_line: ReadLine | None = None,
        prompt: str = "Enter choice: ",
    ) -> None:
        """Initialize menu.

        Args:
            title: Header rendered above the options
            options: Options numbered from 1 in the given order
            console: Output console
            read_line: Reads one line of input given a prompt
            prompt: Prompt text shown when awaiting input
        """
        self.title = title
        self.options = list(options)
        self.console = console or Console()
        self.read_line = read_line or self.console.input
        self.prompt = prompt
        self.state = MenuState.DISPLAYING

    def render(self) -> None:
        self.console.rule(f"[bold blue]{self.title}")
        for number, option in enumerate(self.options, start=1):
            self.console.print(f"{number}) {option.label}", markup=False)
        self.console.print()

    def resolve(self, choice: str) -> MenuOption | None:
        """Return the option for a typed choice, None when it matches nothing."""
        choice = choice.strip()
        if not (choice.isascii() and choice.isdigit()):
            return None
        number = int(choice)
        if 1 <= number <= len(self.options):
            return self.options[number - 1]
        return None

    def run(self) -> int:
        """Loop until an exit option or end of input.

        Returns:
            Number of actions dispatched
        """
        dispatched = 0
        self.state = MenuState.DISPLAYING

        while self.state is not MenuState.EXITED:
            self.render()
            self.state = MenuState.AWAITING_INPUT
            try:
                choice = self.read_line(self.prompt)
            except (EOFError, KeyboardInterrupt):
                self.state = MenuState.EXITED
                break

            self.state = MenuState.DISPATCHING
            option = self.resolve(choice)
            if option is None:
                self.console.print(f"[red]Invalid option:[/red] {escape(repr(choice))}")
                self.state = MenuState.DISPLAYING
                continue

            if option.action is not None:
                dispatched += 1
                try:
                    option.action()
                except DevEnvError as e:
                    LOGGER.error("%s failed: %s", option.label, e)
                    render_error(self.console, e)

            self.state = MenuState.EXITED if option.exits else MenuState.DISPLAYING

        return dispatched


def render_error(console: Console, error: DevEnvError) -> None:
    """Print an error and its explanation."""
    console.print(f"[red]Error:[/red] {escape(str(error))}", highlight=False)
    if error.hint:
        console.print(error.hint, markup=False, highlight=False)


def parse_index(choice: str, count: int) -> int:
    """Convert a 1-based typed number into a 0-based index.

    Raises:
        InvalidSelectionError: If choice is not numeric or out of range
    """
    choice = choice.strip()
    if not (choice.isascii() and choice.isdigit()):
        raise InvalidSelectionError(f"Index must be numeric, got {choice!r}")
    number = int(choice)
    if number < 1 or number > count:
        raise InvalidSelectionError(f"Index out of range: {number} (1-{count})")
    return number - 1


def select_index(count: int, prompt: str, read_line: ReadLine) -> int | None:
    """Ask for one item number.

    Returns:
        0-based index, or None when the user entered nothing or the cancel token

    Raises:
        InvalidSelectionError: If the input is not numeric or out of range
    """
    choice = read_line(prompt).strip()
    if not choice or choice.lower() == CANCEL_TOKEN:
        return None
    return parse_index(choice, count)


def select_many(count: int, prompt: str, read_line: ReadLine) -> tuple[list[int], list[str]]:
    """Ask for several space-separated item numbers.

    Returns:
        (valid 0-based indexes in typed order without repeats, rejected tokens)
    """
    chosen: list[int] = []
    rejected: list[str] = []
    for token in read_line(prompt).split():
        try:
            index = parse_index(token, count)
        except InvalidSelectionError:
            rejected.append(token)
            continue
        if index not in chosen:
            chosen.append(index)
    return chosen, rejected


def confirm(read_line: ReadLine, prompt: str, expected: str) -> bool:
    """Return True only when the user types exactly the expected word."""
    return read_line(prompt).strip() == expected


def confirm_yes_no(read_line: ReadLine, prompt: str, default: bool = False) -> bool:
    """Return the answer to a [y/N] question; empty input gives default."""
    answer = read_line(prompt).strip().lower()
    if not answer:
        return default
    return answer in ("y", "yes")
