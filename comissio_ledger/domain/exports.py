"""CSV export of the debt list"""

import csv
import io
from datetime import date
from typing import Iterable

from comissio_ledger.domain.models import DebtStatus

CSV_HEADERS = [
    "Devedor",
    "Empreendimento",
    "Unidade",
    "VGV",
    "Comissao (%)",
    "Valor Comissao",
    "Parcelas",
    "Status",
    "Data Inicio",
]

MISSING = "---"


def csv_filename(today: date) -> str:
    return f"cobrancas_comissio_{today.isoformat()}.csv"


def debts_to_csv(debts: Iterable, debtors: Iterable, projects: Iterable) -> str:
    """Render debts as CSV text, one row per debt, with debtor and project looked up by id"""
    debtors_by_id = {d.id: d for d in debtors}
    projects_by_id = {p.id: p for p in projects}

    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for debt in debts:
        debtor = debtors_by_id.get(debt.debtor_id)
        project = projects_by_id.get(debt.project_id)
        writer.writerow([
            debtor.name if debtor else MISSING,
            project.name if project else MISSING,
            project.unit if project else MISSING,
            debt.total_value,
            debt.commission_rate,
            debt.commission_value,
            debt.installment_count,
            DebtStatus(debt.status).value,
            debt.start_date.isoformat(),
        ])
    return buf.getvalue()
