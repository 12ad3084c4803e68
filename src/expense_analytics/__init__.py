"""
Expense Analytics

Window-function analyses over a departments / expense categories /
transactions schema:
- Department revenue ranking (ROW_NUMBER vs RANK vs DENSE_RANK)
- Monthly trend (running total, 3-month moving average, yearly min/max)
- Month-over-month change (LAG / LEAD, growth %, trend label)
- Risk segmentation (NTILE quartiles over transaction amounts)

Computed in-process by a small pure-Python window engine, with the
equivalent SQL queries runnable on DuckDB for cross-checking.
"""

__version__ = "0.1.0"
