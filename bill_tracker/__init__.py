"""
Bill Tracker - Source Package

A small household bill tracker: add, edit, delete, filter and sort bills,
with running totals by payment status, saved to local storage through a
simulated API.

DESIGN PRINCIPLES:
1. One owner for bill state (BillManager)
2. Save the whole snapshot on every change
3. Fail visibly: save errors reach the UI
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Bill Tracker Team"
