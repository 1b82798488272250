"""
批量打印当前Revit文档的图纸并合并为一个PDF。

在 pyRevit（CPython 引擎）中运行，从 __revit__ 取当前文档：
    python tools/run_sheet_print.py
    python tools/run_sheet_print.py --sheets 312345,312346 --out "D:/出图/PDF"
    python tools/run_sheet_print.py --config documents/print_runtime.yaml
"""

from __future__ import annotations

import argparse
import builtins
import sys
import uuid
from pathlib import Path


def _add_backend_to_path() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    backend_root = repo_root / "backend"
    if str(backend_root) not in sys.path:
        sys.path.insert(0, str(backend_root))


def _active_document():
    """pyRevit 注入的 __revit__ -> 当前文档"""
    _add_backend_to_path()
    from sheetprint.interfaces import HostUnavailableError  # type: ignore

    uiapp = getattr(builtins, "__revit__", None)
    if uiapp is None or uiapp.ActiveUIDocument is None:
        raise HostUnavailableError("未找到当前Revit文档，请在pyRevit中运行")
    return uiapp.ActiveUIDocument.Document


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="图纸批量黑白打印并合并PDF")
    parser.add_argument("--sheets", default="", help="图纸ID，逗号分隔（默认：全部非占位图纸）")
    parser.add_argument("--out", default="", help="输出目录（默认取配置 output.output_dir）")
    parser.add_argument("--config", default="", help="运行期配置YAML（默认：documents/print_runtime.yaml）")
    return parser.parse_args(argv)


def run_batch(host, renderer, args: argparse.Namespace) -> int:
    """执行一个批次并打印结果，返回退出码"""
    _add_backend_to_path()
    from sheetprint.config import configure_logging, get_config, reload_config  # type: ignore
    from sheetprint.models import PrintJob  # type: ignore
    from sheetprint.pipeline import PipelineExecutor  # type: ignore

    config = reload_config(args.config) if args.config else get_config()
    configure_logging(config)

    job = PrintJob(
        job_id=str(uuid.uuid4()),
        sheet_ids=[s.strip() for s in args.sheets.split(",") if s.strip()],
        output_dir=Path(args.out) if args.out else None,
    )
    job = PipelineExecutor(host, renderer, config).execute(job)

    for flag in job.flags:
        print(f"提示: {flag}")
    if job.error_kind is not None:
        print(f"失败: kind={job.error_kind} sheet={job.failed_sheet} {'; '.join(job.errors)}")
        return 1
    print(f"{job.artifacts.combined_pdf}: pages={job.artifacts.combined_page_count}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    _add_backend_to_path()
    from sheetprint.host import RevitHostDocument, RevitPrintRenderer  # type: ignore
    from sheetprint.interfaces import HostUnavailableError  # type: ignore

    try:
        doc = _active_document()
    except HostUnavailableError as exc:
        print(f"无法运行: {exc}")
        return 2

    return run_batch(RevitHostDocument(doc), RevitPrintRenderer(doc), args)


if __name__ == "__main__":
    raise SystemExit(main())
