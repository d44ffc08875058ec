"""Flat ``Metric,Value`` summary export."""

import logging
from pathlib import Path

from pathrisk.statistics import SummaryStatistics

logger = logging.getLogger(__name__)


def format_summary(stats: SummaryStatistics, exec_time: str = "") -> str:
    rows = [
        ("ExecTime", exec_time),
        ("Model", stats.model_label),
        ("Horizon", stats.horizon),
        ("Paths", stats.path_count),
        ("Mean", f"{stats.mean:.4f}"),
        ("StdDev", f"{stats.std_dev:.4f}"),
        ("Median", f"{stats.median:.4f}"),
        ("P5", f"{stats.p5:.4f}"),
        ("P25", f"{stats.p25:.4f}"),
        ("P75", f"{stats.p75:.4f}"),
        ("P95", f"{stats.p95:.4f}"),
        ("VaR95", f"{stats.var95:.4f}"),
    ]
    lines = ["Metric,Value"] + [f"{name},{value}" for name, value in rows]
    return "\n".join(lines) + "\n"


def write_summary(path: str | Path, stats: SummaryStatistics, exec_time: str = "") -> None:
    Path(path).write_text(format_summary(stats, exec_time), encoding="utf-8")
    logger.info("Wrote summary to %s", path)
