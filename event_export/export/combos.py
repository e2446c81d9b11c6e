"""Org-unit × program combinations used to split export queries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional


@dataclass(frozen=True)
class OrgunitProgramComboItem:
    """One query target: an org unit, optionally narrowed to a program."""
    org_unit: str
    program: Optional[str] = None

    def to_params(self) -> Dict[str, Any]:
        """Query params for this target; the program key is omitted when unset."""
        params: Dict[str, Any] = {"ou": self.org_unit}
        if self.program is not None:
            params["program"] = self.program
        return params


def get_id(item: Any) -> str:
    """Identifier of an org unit or program given as a model, a dict or a bare uid."""
    if isinstance(item, str):
        return item
    if isinstance(item, dict):
        return item["id"]
    return item.id


def get_orgunit_program_combo(
    orgunits: Iterable[Any],
    programs: Optional[Iterable[Any]] = None
) -> List[OrgunitProgramComboItem]:
    """
    Cross product of org units and programs, org units outermost.

    With no programs every org unit yields a single item without a program.
    The order is fully determined by the input order.
    """
    program_ids = [get_id(p) for p in programs] if programs else []

    combo: List[OrgunitProgramComboItem] = []
    for orgunit in orgunits:
        orgunit_id = get_id(orgunit)
        if program_ids:
            for program_id in program_ids:
                combo.append(OrgunitProgramComboItem(orgunit_id, program_id))
        else:
            combo.append(OrgunitProgramComboItem(orgunit_id))
    return combo
