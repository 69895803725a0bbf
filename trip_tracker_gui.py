"""
Trip Tracker GUI
- Loads users, payments, trip details and expenses from a Google Sheet.
- Shows the trip overview, a live countdown, the expense split and, for
  admins, every member's payment status.

Run:
  python trip_tracker_gui.py

Configuration (environment or .env):
  SHEET_ID, USERS_SHEET, PAYMENTS_SHEET, TRIP_SHEET, EXPENSES_SHEET

Dependencies:
  pip install -e .
(Tkinter ships with most Python distributions; on some Linux you may need: sudo apt-get install python3-tk)
"""
from __future__ import annotations
import logging

try:
    import tkinter as tk
except ModuleNotFoundError:
    tk = None

from config import load_config
from dashboard import TripDashboard
from session import FileSessionStore


def main():
    """Main entry point for the application"""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if tk is None:
        raise RuntimeError(
            'tkinter is not available. Install it (e.g., on Ubuntu: sudo apt-get install python3-tk) '
            'and re-run to use the GUI.'
        )

    from main_app import TripTrackerApp

    dashboard = TripDashboard(load_config(), store=FileSessionStore())
    root = tk.Tk()
    TripTrackerApp(root, dashboard)
    root.mainloop()


if __name__ == "__main__":
    main()
