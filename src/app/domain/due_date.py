"""Regra de vencimento: N-ésimo dia útil do mês seguinte.

Dia útil = segunda a sexta. Feriados não são considerados.
"""

from __future__ import annotations

from datetime import date, timedelta


def is_business_day(day: date) -> bool:
    return day.weekday() < 5


def first_day_of_next_month(reference: date) -> date:
    if reference.month == 12:
        return date(reference.year + 1, 1, 1)
    return date(reference.year, reference.month + 1, 1)


def nth_business_day_of_next_month(reference: date, n: int) -> date:
    """Retorna o N-ésimo dia útil do mês seguinte a `reference`.

    Exemplo: referência 2026-07-03, N=5; agosto/2026 começa num sábado,
    logo os dias úteis são 3, 4, 5, 6 e 7 -> 2026-08-07.

    Raises:
        ValueError: Se n < 1.
    """
    if n < 1:
        raise ValueError(f"n deve ser >= 1 (recebido {n})")

    day = first_day_of_next_month(reference)
    counted = 0
    while True:
        if is_business_day(day):
            counted += 1
            if counted == n:
                return day
        day += timedelta(days=1)
