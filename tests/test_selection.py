"""Tests for proposal selection tracking."""

from __future__ import annotations

import uuid

from tidyname.rename import RenameProposal, RenameStatus, SelectionManager


def _proposal(path: str, status: RenameStatus = RenameStatus.READY) -> RenameProposal:
    name = path.rsplit("/", 1)[-1]
    return RenameProposal(
        id=str(uuid.uuid4()),
        original_path=path,
        original_name=name,
        proposed_name=f"new-{name}",
        proposed_path=f"/photos/new-{name}",
        status=status,
    )


def test_select_by_status_and_summary() -> None:
    proposals = [
        _proposal("/photos/a.jpg"),
        _proposal("/photos/b.jpg", RenameStatus.CONFLICT),
        _proposal("/photos/c.jpg"),
    ]
    manager = SelectionManager(proposals)

    manager.select_by_status(RenameStatus.READY)
    summary = manager.get_summary()

    assert summary.total == 3
    assert summary.selected == 2
    assert summary.selected_ready == 2
    assert manager.selected_ids == {proposals[0].id, proposals[2].id}


def test_executable_proposals_are_ready_only() -> None:
    proposals = [_proposal("/photos/a.jpg"), _proposal("/photos/b.jpg", RenameStatus.MISSING_DATA)]
    manager = SelectionManager(proposals)

    manager.select_all()

    assert len(manager.get_selected_proposals()) == 2
    assert [item.original_path for item in manager.get_executable_proposals()] == ["/photos/a.jpg"]


def test_toggle_invert_and_predicates() -> None:
    proposals = [_proposal("/photos/a.jpg"), _proposal("/photos/b.jpg")]
    manager = SelectionManager(proposals)

    manager.toggle(proposals[0].id)
    assert manager.is_selected(proposals[0].id)
    manager.invert_selection()
    assert manager.selected_ids == {proposals[1].id}
    manager.deselect_where(lambda proposal: proposal.original_path.endswith("b.jpg"))
    assert manager.get_summary().selected == 0
    manager.select("unknown-id")
    assert manager.get_summary().selected == 0


def test_selection_survives_regeneration() -> None:
    manager = SelectionManager([_proposal("/photos/a.jpg"), _proposal("/photos/b.jpg")])
    manager.select_all()

    regenerated = [_proposal("/photos/a.jpg"), _proposal("/photos/c.jpg")]
    manager.set_proposals(regenerated)

    assert manager.is_selected(regenerated[0].id)
    assert not manager.is_selected(regenerated[1].id)
    assert manager.get_summary().selected == 1


def test_snapshot_restores_by_path() -> None:
    manager = SelectionManager([_proposal("/photos/a.jpg"), _proposal("/photos/b.jpg")])
    manager.select_by_status(RenameStatus.READY)
    snapshot = manager.get_selection_snapshot()

    fresh = [_proposal("/photos/b.jpg"), _proposal("/photos/d.jpg")]
    other = SelectionManager(fresh)
    other.restore_from_snapshot(snapshot)

    assert snapshot.paths == ("/photos/a.jpg", "/photos/b.jpg")
    assert other.selected_ids == {fresh[0].id}
