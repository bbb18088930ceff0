"""Command-line interface for shinypenny.

Usage:
    shinypenny --csv expenses.csv
    shinypenny --record 2024-05-02 "Book" "Shop" 10.00 7% 10.70 receipt.pdf
    shinypenny --csv expenses.csv --learning-budget -o out.pdf
"""
