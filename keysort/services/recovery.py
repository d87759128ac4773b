"""Crash recovery for interrupted cross-volume moves."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ..core.models import VerifyMode
from ..core.protocols import OperationJournal
from .mover import files_match, partial_path


logger = logging.getLogger(__name__)


@dataclass
class RecoveryReport:
    """What recovery did with each journaled operation."""
    cleaned: int = 0      # rolled back, original left in place
    completed: int = 0    # finished, file is at its target
    unresolved: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.cleaned + self.completed + len(self.unresolved)


class JournalRecovery:
    """Finishes or rolls back moves a crash interrupted.

    A move is journaled before its copy starts and completed once the
    original is deleted, so each pending entry is in one of these states:

    - partial copy present: the copy never got verified; delete it
    - original and target present: delete the original once the target verifies
    - only the target present: the move finished, drop the entry
    - only the original present: nothing happened, drop the entry

    Anything else is left in the journal and reported as unresolved.
    """

    def __init__(self, journal: OperationJournal, verify_mode: VerifyMode = VerifyMode.HASH):
        self._journal = journal
        self._verify_mode = verify_mode

    def pending_count(self) -> int:
        return len(self._journal.get_pending_operations())

    def recover(self) -> RecoveryReport:
        report = RecoveryReport()

        for op in self._journal.get_pending_operations():
            source = Path(op.source_path)
            target = Path(op.target_path)
            partial = partial_path(target)
            source_present = source.is_file()
            target_present = target.is_file()

            if partial.exists():
                if not source_present:
                    report.unresolved.append(f"{source}: original missing, partial copy kept at {partial}")
                    continue
                partial.unlink()
                logger.info("Removed partial copy %s", partial)
                report.cleaned += 1
            elif source_present and target_present:
                if not files_match(source, target, self._verify_mode):
                    report.unresolved.append(f"{source}: copy at {target} does not match")
                    continue
                source.unlink()
                logger.info("Finished interrupted move %s -> %s", source, target)
                report.completed += 1
            elif target_present:
                report.completed += 1
            elif source_present:
                report.cleaned += 1
            else:
                report.unresolved.append(f"{source}: neither original nor {target} exists")
                continue

            self._journal.complete_pending_operation(op.id)

        if report.unresolved:
            for problem in report.unresolved:
                logger.warning("Unresolved operation: %s", problem)
        return report
