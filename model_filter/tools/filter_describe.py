# model_filter/tools/filter_describe.py
# Show how a numeric filter expression parses and the SQL it compiles to.
#
#   python -m model_filter.tools.filter_describe "1, 2, 5 - 7.3" --field id
#   python -m model_filter.tools.filter_describe "1, 2, 5 - 7.3" --field id --negate

from __future__ import annotations

import argparse
from typing import List, Optional

from sqlalchemy import Column, Float, MetaData, Table, select

from model_filter.logging_setup import start_log
from model_filter.numeric_expression import build_numeric_predicate, parse_numeric_expression
from model_filter.predicates import apply_predicates


def _format_number(value: float) -> str:
    return repr(value)


def describe(text: str, field_name: str = "value", negate: bool = False, table_name: str = "t") -> List[str]:
    """Return the report lines for ``text``; no database is touched."""
    expression = parse_numeric_expression(text)
    table = Table(table_name, MetaData(), Column(field_name, Float))
    predicate = build_numeric_predicate(text, field_name, negate=negate)
    stmt = apply_predicates(select(table), table, [predicate])

    lines = [f"input:  {text!r}"]
    points = ", ".join(_format_number(p) for p in sorted(expression.points)) or "-"
    ranges = ", ".join(f"{_format_number(lo)}..{_format_number(hi)}" for lo, hi in sorted(expression.ranges)) or "-"
    lines.append(f"points: {points}")
    lines.append(f"ranges: {ranges}")
    if not predicate:
        lines.append("where:  (no constraint)")
    else:
        where = stmt.whereclause.compile(compile_kwargs={"literal_binds": True})
        lines.append(f"where:  {where}")
    return lines


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Describe a numeric filter expression")
    ap.add_argument("expression", help='Expression such as "1, 2, 5-7.3"')
    ap.add_argument("--field", default="value", help="Column name used in the generated SQL")
    ap.add_argument("--negate", action="store_true", help="Build the not-equal / not-in form")
    ap.add_argument("--log-level", default=None, help="Logging level (default: LOG_LEVEL env or INFO)")
    args = ap.parse_args(argv)

    start_log(app_name="filter_describe", level=args.log_level)
    for line in describe(args.expression, args.field, negate=args.negate):
        print(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
