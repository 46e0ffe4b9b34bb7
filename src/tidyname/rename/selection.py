"""Tracking which proposals the user approved for execution."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Sequence

from .models import RenameProposal, RenameStatus

SelectionPredicate = Callable[[RenameProposal], bool]


@dataclass(frozen=True)
class SelectionSummary:
    total: int = 0
    selected: int = 0
    selected_ready: int = 0
    selected_conflicts: int = 0
    selected_missing_data: int = 0
    selected_no_change: int = 0
    selected_invalid_name: int = 0


@dataclass(frozen=True)
class SelectionSnapshot:
    """Selection persisted by original file path so it survives regeneration."""

    paths: tuple[str, ...] = ()


class SelectionManager:
    """In-memory selection over the proposals of one preview.

    Selection is stored by original file path. Proposal ids are minted fresh for every preview,
    so the id-based methods translate ids to paths through the current proposals. Calling
    :meth:`set_proposals` with a regenerated preview keeps every path that is still present.
    """

    def __init__(self, proposals: Optional[Sequence[RenameProposal]] = None) -> None:
        self._by_path: dict[str, RenameProposal] = {}
        self._path_by_id: dict[str, str] = {}
        self._selected: set[str] = set()
        if proposals is not None:
            self.set_proposals(proposals)

    def set_proposals(self, proposals: Sequence[RenameProposal]) -> None:
        """Replace the tracked proposals, dropping selections whose files disappeared."""
        self._by_path = {proposal.original_path: proposal for proposal in proposals}
        self._path_by_id = {proposal.id: proposal.original_path for proposal in proposals}
        self._selected &= set(self._by_path)

    def _paths_where(self, predicate: SelectionPredicate) -> Iterable[str]:
        return (path for path, proposal in self._by_path.items() if predicate(proposal))

    def select(self, proposal_id: str) -> None:
        path = self._path_by_id.get(proposal_id)
        if path is not None:
            self._selected.add(path)

    def deselect(self, proposal_id: str) -> None:
        path = self._path_by_id.get(proposal_id)
        if path is not None:
            self._selected.discard(path)

    def toggle(self, proposal_id: str) -> None:
        path = self._path_by_id.get(proposal_id)
        if path is None:
            return
        if path in self._selected:
            self._selected.discard(path)
        else:
            self._selected.add(path)

    def is_selected(self, proposal_id: str) -> bool:
        return self._path_by_id.get(proposal_id) in self._selected

    def select_all(self) -> None:
        self._selected = set(self._by_path)

    def select_none(self) -> None:
        self._selected.clear()

    def invert_selection(self) -> None:
        self._selected = set(self._by_path) - self._selected

    def select_by_status(self, status: RenameStatus) -> None:
        """Add every proposal with ``status`` to the selection."""
        self._selected.update(self._paths_where(lambda proposal: proposal.status == status))

    def deselect_by_status(self, status: RenameStatus) -> None:
        self._selected.difference_update(
            list(self._paths_where(lambda proposal: proposal.status == status))
        )

    def select_where(self, predicate: SelectionPredicate) -> None:
        self._selected.update(self._paths_where(predicate))

    def deselect_where(self, predicate: SelectionPredicate) -> None:
        self._selected.difference_update(list(self._paths_where(predicate)))

    @property
    def selected_ids(self) -> set[str]:
        return {self._by_path[path].id for path in self._selected}

    def get_summary(self) -> SelectionSummary:
        """Return total and selected counts broken down by status."""
        selected = self.get_selected_proposals()

        def count(status: RenameStatus) -> int:
            return sum(1 for proposal in selected if proposal.status == status)

        return SelectionSummary(
            total=len(self._by_path),
            selected=len(selected),
            selected_ready=count(RenameStatus.READY),
            selected_conflicts=count(RenameStatus.CONFLICT),
            selected_missing_data=count(RenameStatus.MISSING_DATA),
            selected_no_change=count(RenameStatus.NO_CHANGE),
            selected_invalid_name=count(RenameStatus.INVALID_NAME),
        )

    def get_selected_proposals(self) -> list[RenameProposal]:
        """Return selected proposals in preview order."""
        return [proposal for path, proposal in self._by_path.items() if path in self._selected]

    def get_executable_proposals(self) -> list[RenameProposal]:
        """Return selected proposals that are READY; only these may be executed."""
        return [
            proposal
            for proposal in self.get_selected_proposals()
            if proposal.status == RenameStatus.READY
        ]

    def get_selection_snapshot(self) -> SelectionSnapshot:
        return SelectionSnapshot(paths=tuple(path for path in self._by_path if path in self._selected))

    def restore_from_snapshot(self, snapshot: SelectionSnapshot) -> None:
        """Replace the selection with the snapshot's paths that exist in the current proposals."""
        self._selected = {path for path in snapshot.paths if path in self._by_path}


__all__ = ["SelectionManager", "SelectionPredicate", "SelectionSnapshot", "SelectionSummary"]
