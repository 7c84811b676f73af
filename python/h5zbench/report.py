"""
Turn a sweep's results into a report: a results table plus the best-ratio,
fastest and best-balance picks, rendered as markdown, CSV or JSON.
"""

import csv
import json
import sys
from typing import Dict, List, NamedTuple, Optional, Sequence

import pandas as pd

from .runner import CompressionResult
from .sweep import is_baseline
from .utils import (
    available_memory,
    cpu_info,
    current_time_string,
    format_size,
    save_text,
    system_info,
)

COLUMNS = [
    "filter_name",
    "parameters",
    "compression_level",
    "compression_ratio",
    "compression_time_ms",
    "decompression_time_ms",
    "compressed_size_bytes",
    "original_size_bytes",
]

FORMATS = {"markdown": ".md", "csv": ".csv", "json": ".json"}


class Analysis(NamedTuple):
    best_ratio: CompressionResult
    fastest: CompressionResult
    best_balance: CompressionResult
    balance_score: float


def results_frame(results: Sequence[CompressionResult]) -> pd.DataFrame:
    return pd.DataFrame([r.as_record() for r in results], columns=COLUMNS)


def balance_score(result: CompressionResult) -> float:
    return result.compression_ratio / (result.compression_time_ms + 1.0)


def analyze(results: Sequence[CompressionResult]) -> Optional[Analysis]:
    """
    Pick the highlighted trials among the non-baseline results.

    Ties go to the earliest result. Returns None when only the baseline (or
    nothing) is present.
    """
    candidates = [r for r in results if not is_baseline(r)]
    if not candidates:
        return None

    df = results_frame(candidates)
    score = df["compression_ratio"] / (df["compression_time_ms"] + 1.0)

    best_ratio = candidates[int(df["compression_ratio"].idxmax())]
    fastest = candidates[int(df["compression_time_ms"].idxmin())]
    best_balance = candidates[int(score.idxmax())]
    return Analysis(best_ratio, fastest, best_balance, balance_score(best_balance))


def system_metadata() -> Dict:
    return {
        "timestamp": current_time_string(),
        "os": system_info(),
        "cpu": cpu_info(),
        "available_memory": available_memory(),
    }


def _highlight(title: str, result: CompressionResult) -> List[str]:
    return [
        f"### {title}",
        f"- **Filter**: {result.filter_name}",
        f"- **Level**: {result.compression_level}",
        f"- **Ratio**: {result.compression_ratio:.2f}",
        f"- **Time**: {result.compression_time_ms:.1f} ms",
    ]


def render_markdown(results: Sequence[CompressionResult], metadata: Optional[Dict] = None) -> str:
    metadata = metadata or system_metadata()
    lines = [
        "# HDF5 Compression Test Report",
        "",
        "## Test Information",
        f"- Test Time: {metadata['timestamp']}",
        f"- System: {metadata['os']}",
        f"- CPU: {metadata['cpu']}",
        f"- Available Memory: {format_size(metadata['available_memory'])}",
        "",
        "## Test Results",
        "",
        "| Filter | Parameters | Level | Ratio | Comp Time (ms) | Decomp Time (ms) | Size | Original Size |",
        "|--------|------------|-------|-------|----------------|------------------|------|---------------|",
    ]
    for r in results:
        lines.append(
            f"| {r.filter_name} | {r.parameters} | {r.compression_level} | {r.compression_ratio:.2f} "
            f"| {r.compression_time_ms:.1f} | {r.decompression_time_ms:.1f} "
            f"| {format_size(r.compressed_size_bytes)} | {format_size(r.original_size_bytes)} |"
        )

    lines += ["", "## Analysis", ""]
    analysis = analyze(results)
    if analysis is None:
        lines.append("No test results available for analysis.")
        recommendations = ("ZSTD level 19", "LZ4 level 1", "GZIP level 6")
    else:
        lines += _highlight("Best Compression Ratio", analysis.best_ratio) + [""]
        lines += _highlight("Fastest Compression", analysis.fastest) + [""]
        lines += _highlight("Best Balance (Ratio/Time)", analysis.best_balance)
        lines.append(f"- **Score**: {analysis.balance_score:.4f} ratio/ms")
        recommendations = tuple(
            f"{r.filter_name} level {r.compression_level}"
            for r in (analysis.best_ratio, analysis.fastest, analysis.best_balance)
        )

    lines += [
        "",
        "## Conclusion",
        "",
        "Based on the test results, the recommended compression settings depend on the use case:",
        "",
        f"1. **For maximum compression ratio**: Use {recommendations[0]}",
        f"2. **For fastest compression**: Use {recommendations[1]}",
        f"3. **For best balance**: Use {recommendations[2]}",
    ]
    return "\n".join(lines) + "\n"


def render_csv(results: Sequence[CompressionResult]) -> str:
    """One row per result; text fields quoted, ratio to 4 decimals, times to 3."""
    df = results_frame(results).round({
        "compression_ratio": 4,
        "compression_time_ms": 3,
        "decompression_time_ms": 3,
    })
    return df.to_csv(index=False, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")


def render_json(results: Sequence[CompressionResult], metadata: Optional[Dict] = None) -> str:
    metadata = metadata or system_metadata()
    records = []
    for r in results:
        record = r.as_record()
        record["compression_ratio"] = round(r.compression_ratio, 4)
        records.append(record)
    document = {
        "test_report": {
            "timestamp": metadata["timestamp"],
            "system_info": {
                "os": metadata["os"],
                "cpu": metadata["cpu"],
                "available_memory": metadata["available_memory"],
            },
            "results": records,
        }
    }
    return json.dumps(document, indent=2) + "\n"


def render(results: Sequence[CompressionResult], fmt: str = "markdown") -> str:
    if fmt == "markdown":
        return render_markdown(results)
    if fmt == "csv":
        return render_csv(results)
    if fmt == "json":
        return render_json(results)
    raise ValueError(f"Unknown report format: {fmt}")


def write_report(results: Sequence[CompressionResult], output_file: str, fmt: str = "markdown") -> bool:
    """Render ``results`` and save them to ``output_file``. Returns False on any failure."""
    print(f"Generating report in {fmt} format: {output_file}")
    try:
        content = render(results, fmt)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return False

    if not save_text(output_file, content):
        print(f"Error: Failed to save report to: {output_file}", file=sys.stderr)
        return False
    print(f"Report saved successfully: {output_file}")
    return True


def print_summary(results: Sequence[CompressionResult]) -> None:
    """Console table of the sweep, best compression first."""
    if not results:
        return
    df = results_frame(results).sort_values("compressed_size_bytes", kind="stable")
    print("\n" + "=" * 90)
    print("BENCHMARK SUMMARY (sorted by compressed size)")
    print("=" * 90)
    print(f"{'Filter':<20} {'Level':<7} {'Size (bytes)':<15} {'Ratio':<10} {'Comp (ms)':<12} {'Decomp (ms)':<12}")
    print("-" * 90)
    for row in df.itertuples(index=False):
        print(
            f"{row.filter_name:<20} {row.compression_level:<7} {row.compressed_size_bytes:<15,} "
            f"{row.compression_ratio:<10.3f} {row.compression_time_ms:<12.1f} {row.decompression_time_ms:<12.1f}"
        )
