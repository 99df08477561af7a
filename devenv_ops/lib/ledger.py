"""Append-only ledger of completed provisioning steps."""

from pathlib import Path


class StepLedger:
    """Flat text file holding one completed step id per line.

    A step is done when a line exactly equal to its id exists. The file is only
    ever appended to, so marking a step twice leaves a duplicate line, which is
    harmless for existence lookups. There is no locking: one interactive user,
    one run at a time.
    """

    def __init__(self, path: Path) -> None:
        """Initialize ledger.

        Args:
            path: Ledger file location (created on first mark_done)
        """
        self.path = path

    def is_done(self, step_id: str) -> bool:
        """Return True if step_id was marked done, False if not or no ledger yet."""
        return step_id in self.completed()

    def mark_done(self, step_id: str) -> None:
        """Append step_id to the ledger."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(f"{step_id}\n")

    def completed(self) -> list[str]:
        """Return completed step ids in file order, duplicates included."""
        if not self.path.exists():
            return []
        return self.path.read_text(encoding="utf-8").splitlines()

    def reset(self) -> None:
        """Delete the ledger so every step runs again."""
        self.path.unlink(missing_ok=True)
