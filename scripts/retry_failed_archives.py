#!/usr/bin/env python3
"""Refaz o arquivamento de PDFs de boletos com archive_status=archive_failed.

Uso:
    python scripts/retry_failed_archives.py --limit 50 --apply

Padrao: dry-run (apenas lista os registros).
"""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

from app.bootstrap import get_boleto_components, initialize_app, shutdown
from app.domain.boleto import ArchiveStatus
from utils.errors import BoletoError

if TYPE_CHECKING:
    from app.protocols.bank_slip_store import BankSlipStoreProtocol
    from app.use_cases.boleto import IssueAndArchiveUseCase


@dataclass(frozen=True)
class RetryStats:
    scanned: int = 0
    archived: int = 0
    failed: int = 0


async def retry_failed_archives(
    use_case: IssueAndArchiveUseCase,
    store: BankSlipStoreProtocol,
    *,
    apply: bool,
    limit: int = 100,
) -> RetryStats:
    records = await store.list_by_archive_status(ArchiveStatus.ARCHIVE_FAILED, limit=limit)
    archived = failed = 0

    for record in records:
        if not apply:
            print(f"[dry-run] nsu_code={record.nsu_code} link={record.temporary_pdf_link}")
            continue
        try:
            result = await use_case.retry_archive(record.nsu_code)
        except BoletoError as exc:
            failed += 1
            print(f"[apply] nsu_code={record.nsu_code} failed kind={exc.kind}")
            continue
        archived += 1
        print(f"[apply] nsu_code={record.nsu_code} archived url={result.archived_pdf_url}")

    return RetryStats(scanned=len(records), archived=archived, failed=failed)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--limit",
        type=int,
        default=100,
        help="Maximo de registros processados nesta execucao.",
    )
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Executa o arquivamento. Sem esta flag executa dry-run.",
    )
    return parser.parse_args()


async def _run(args: argparse.Namespace) -> RetryStats:
    components = get_boleto_components()
    try:
        return await retry_failed_archives(
            components.use_case,
            components.bank_slip_store,
            apply=args.apply,
            limit=args.limit,
        )
    finally:
        await shutdown()


def main() -> None:
    args = parse_args()
    initialize_app()
    stats = asyncio.run(_run(args))
    mode = "apply" if args.apply else "dry-run"
    print(
        f"[{mode}] scanned={stats.scanned} "
        f"archived={stats.archived} failed={stats.failed}"
    )


if __name__ == "__main__":
    main()
