"""List filters used by the debtor, project and debt views"""

from typing import Iterable, List, Optional

from comissio_ledger.domain.models import DebtStatus

ALL_STATUSES = "ALL"


def _contains(haystack: Optional[str], needle: str) -> bool:
    return needle in (haystack or "").lower()


def filter_debtors(debtors: Iterable, search: Optional[str] = None) -> List:
    """Case-insensitive match on name, or substring match on tax id"""
    if not search:
        return list(debtors)
    term = search.lower()
    return [d for d in debtors if _contains(d.name, term) or search in (d.tax_id or "")]


def filter_projects(projects: Iterable, search: Optional[str] = None) -> List:
    """Case-insensitive match on project name, tower or unit"""
    if not search:
        return list(projects)
    term = search.lower()
    return [
        p for p in projects
        if _contains(p.name, term) or _contains(p.tower, term) or _contains(p.unit, term)
    ]


def filter_debts(
    debts: Iterable,
    debtors: Iterable,
    projects: Iterable,
    search: Optional[str] = None,
    status: Optional[str] = None,
) -> List:
    """
    Filter debts by debtor/project name and by status.

    `status` is a stored status value (ABERTA, PARCIAL, QUITADA) or ALL.
    """
    debtor_names = {d.id: d.name for d in debtors}
    project_names = {p.id: p.name for p in projects}
    wanted = None if not status or status == ALL_STATUSES else DebtStatus(status)
    term = (search or "").lower()

    result = []
    for debt in debts:
        if wanted is not None and DebtStatus(debt.status) is not wanted:
            continue
        if term and not (
            _contains(debtor_names.get(debt.debtor_id), term)
            or _contains(project_names.get(debt.project_id), term)
        ):
            continue
        result.append(debt)
    return result
