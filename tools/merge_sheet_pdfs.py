"""
合并已打印的单张PDF（打印批次中断后手工补合并）。

用法：
    python tools/merge_sheet_pdfs.py --dir "C:/Temp/Revit Sheet PDFs"
    python tools/merge_sheet_pdfs.py A101_Plan.pdf A102_Section.pdf --out combined.pdf
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path


def _add_backend_to_path() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    backend_root = repo_root / "backend"
    if str(backend_root) not in sys.path:
        sys.path.insert(0, str(backend_root))


def _collect_inputs(pdf_dir: Path, combined_name: str) -> list[Path]:
    return sorted(p for p in pdf_dir.glob("*.pdf") if p.name != combined_name)


def main() -> int:
    parser = argparse.ArgumentParser(description="按顺序合并单张图纸PDF")
    parser.add_argument("pdfs", nargs="*", help="待合并PDF（按给定顺序）")
    parser.add_argument("--dir", default="", help="可选：合并目录下全部PDF（按文件名排序）")
    parser.add_argument("--out", default="", help="输出路径（默认：<目录>/COMBINED_REVIT_SHEETS.pdf）")
    args = parser.parse_args()

    _add_backend_to_path()
    from sheetprint.config import OutputConfig  # type: ignore
    from sheetprint.interfaces import MergeError  # type: ignore
    from sheetprint.render import PdfMerger  # type: ignore

    combined_name = OutputConfig().combined_file_name
    if args.dir:
        pdf_dir = Path(args.dir)
        inputs = _collect_inputs(pdf_dir, combined_name)
        out_path = Path(args.out) if args.out else pdf_dir / combined_name
    else:
        inputs = [Path(p) for p in args.pdfs]
        out_path = Path(args.out) if args.out else Path(combined_name)

    if not inputs:
        print("未找到可合并的PDF")
        return 1

    try:
        result = PdfMerger().merge(inputs, out_path)
    except MergeError as exc:
        print(f"合并失败: {exc}")
        return 2

    for skipped in result.skipped_inputs:
        print(f"跳过（不存在）: {skipped}")
    print(f"{result.output_path}: files={len(result.merged_inputs)} pages={result.page_count}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
