"""
Main application window for Trip Tracker GUI
"""
from __future__ import annotations
import threading
from typing import Optional

try:
    import tkinter as tk
    from tkinter import ttk, messagebox, filedialog
except ModuleNotFoundError:
    tk = None
    ttk = None
    messagebox = None
    filedialog = None

from dashboard import STATE_FAILED, TripDashboard
from errors import LoadError
from excel_export import export_dashboard
from gui_dialogs import LoginDialog
from models import Countdown
from utils import format_money

TICK_MS = 1000
POLL_MS = 100


def countdown_text(cd: Countdown) -> str:
    if cd.is_past:
        return "Trip is underway! The adventure has begun."
    return f"Trip starts in: {cd.days:02d} days {cd.hours:02d}:{cd.minutes:02d}:{cd.seconds:02d}"


class TripTrackerApp(ttk.Frame):
    """Main application window"""

    def __init__(self, master: tk.Tk, dashboard: TripDashboard):
        super().__init__(master, padding=8)
        self.master = master
        self.master.title("Trip Tracker")
        self.master.geometry("1000x650")
        self.grid(row=0, column=0, sticky="nsew")
        self.master.rowconfigure(0, weight=1)
        self.master.columnconfigure(0, weight=1)
        self.master.protocol("WM_DELETE_WINDOW", self.quit_app)

        self.dashboard = dashboard
        self._loader: Optional[threading.Thread] = None
        self._tick_id: Optional[str] = None

        self._build_menu()
        self._build_ui()
        self.start_load()

    # ---------- Menu ----------
    def _build_menu(self):
        """Build application menu bar"""
        menubar = tk.Menu(self.master)
        filem = tk.Menu(menubar, tearoff=0)
        filem.add_command(label="Reload", command=self.start_load)
        filem.add_command(label="Export Excel…", command=self.export_excel_dialog)
        filem.add_separator()
        filem.add_command(label="Logout", command=self.logout)
        filem.add_command(label="Exit", command=self.quit_app)
        menubar.add_cascade(label="File", menu=filem)
        self.master.config(menu=menubar)

    # ---------- UI ----------
    def _build_ui(self):
        """Build header, overview cards and the expense/member tabs"""
        self.columnconfigure(0, weight=1)

        self.title_var = tk.StringVar(value="Loading trip data…")
        self.welcome_var = tk.StringVar(value="")
        header = ttk.Frame(self)
        header.grid(row=0, column=0, sticky="ew")
        ttk.Label(header, textvariable=self.title_var, font=("TkDefaultFont", 16, "bold")).pack(side="left")
        ttk.Button(header, text="Logout", command=self.logout).pack(side="right")
        ttk.Label(header, textvariable=self.welcome_var).pack(side="right", padx=10)

        overview = ttk.Frame(self, padding=(0, 10))
        overview.grid(row=1, column=0, sticky="ew")
        self.total_var = tk.StringVar(value="")
        self.per_head_var = tk.StringVar(value="")
        self.my_var = tk.StringVar(value="")
        self.countdown_var = tk.StringVar(value="Calculating countdown...")
        for i, var in enumerate((self.total_var, self.per_head_var, self.my_var, self.countdown_var)):
            ttk.Label(overview, textvariable=var).grid(row=i, column=0, sticky="w")

        nb = ttk.Notebook(self)
        nb.grid(row=2, column=0, sticky="nsew")
        self.rowconfigure(2, weight=1)
        self.notebook = nb

        self.tab_expenses = ttk.Frame(nb, padding=8)
        self.tab_members = ttk.Frame(nb, padding=8)
        nb.add(self.tab_expenses, text="Expense Breakdown")
        nb.add(self.tab_members, text="Members")

        self._build_expenses_tab()
        self._build_members_tab()

    def _build_expenses_tab(self):
        """Build expense table with totals"""
        self.tab_expenses.columnconfigure(0, weight=1)
        cols = ("category", "amount", "date", "notes")
        self.exp_tree = ttk.Treeview(self.tab_expenses, columns=cols, show="headings", height=16)
        for c, w in zip(cols, [160, 120, 120, 420]):
            self.exp_tree.heading(c, text=c.title())
            self.exp_tree.column(c, width=w, anchor="e" if c == "amount" else "w")
        self.exp_tree.grid(row=0, column=0, sticky="nsew")
        self.tab_expenses.rowconfigure(0, weight=1)

        yscroll = ttk.Scrollbar(self.tab_expenses, orient="vertical", command=self.exp_tree.yview)
        self.exp_tree.configure(yscroll=yscroll.set)
        yscroll.grid(row=0, column=1, sticky="ns")

        self.exp_summary_var = tk.StringVar(value="")
        ttk.Label(self.tab_expenses, textvariable=self.exp_summary_var).grid(row=1, column=0, sticky="w", pady=(8, 0))

    def _build_members_tab(self):
        """Build member payment status table (admins only)"""
        self.tab_members.columnconfigure(0, weight=1)
        cols = ("member", "paid", "status", "due")
        self.mem_tree = ttk.Treeview(self.tab_members, columns=cols, show="headings", height=16)
        for c, w in zip(cols, [200, 140, 120, 140]):
            self.mem_tree.heading(c, text=c.title())
            self.mem_tree.column(c, width=w, anchor="w")
        self.mem_tree.tag_configure("you", font=("TkDefaultFont", 10, "bold"))
        self.mem_tree.grid(row=0, column=0, sticky="nsew")
        self.tab_members.rowconfigure(0, weight=1)

    # ---------- Loading ----------
    def start_load(self):
        """Fetch sheets on a worker thread and poll for completion"""
        if self._loader and self._loader.is_alive():
            return
        self.title_var.set("Loading trip data…")
        self._loader = threading.Thread(target=self.dashboard.load, daemon=True)
        self._loader.start()
        self.after(POLL_MS, self._poll_load)

    def _poll_load(self):
        if self._loader and self._loader.is_alive():
            self.after(POLL_MS, self._poll_load)
            return
        if self.dashboard.state == STATE_FAILED:
            missing = ", ".join(self.dashboard.missing_tables)
            self.title_var.set("Could not load trip data")
            if messagebox.askretrycancel("Load failed", f"These sheets could not be loaded:\n{missing}"):
                self.start_load()
            return
        if not self.dashboard.loaded:
            return
        if self.dashboard.user is None and self.dashboard.restore_session() is None:
            self.prompt_login()
            if self.dashboard.user is None:
                return
        self.refresh_all()
        self._schedule_tick()

    # ---------- Session ----------
    def prompt_login(self):
        dlg = LoginDialog(self.master, self.dashboard)
        self.master.wait_window(dlg)
        if dlg.result is None:
            self.quit_app()

    def logout(self):
        if not self.dashboard.loaded:
            return
        self.dashboard.logout()
        self.prompt_login()
        if self.dashboard.user is not None:
            self.refresh_all()

    def quit_app(self):
        if self._tick_id:
            self.after_cancel(self._tick_id)
            self._tick_id = None
        self.dashboard.close()
        self.master.destroy()

    # ---------- Export ----------
    def export_excel_dialog(self):
        """Export current snapshot to Excel file"""
        try:
            snap = self.dashboard.snapshot()
        except LoadError as ex:
            messagebox.showerror("Export", str(ex))
            return
        fp = filedialog.asksaveasfilename(
            title="Export Excel",
            defaultextension=".xlsx",
            filetypes=[("Excel Workbook", "*.xlsx")]
        )
        if not fp:
            return
        try:
            export_dashboard(snap, fp)
            messagebox.showinfo("Export", f"Exported: {fp}")
        except OSError as ex:
            messagebox.showerror("Export failed", str(ex))

    # ---------- Refresh ----------
    def _schedule_tick(self):
        if self._tick_id:
            self.after_cancel(self._tick_id)
        self._tick()

    def _tick(self):
        """Re-render the countdown once per second"""
        cd = self.dashboard.countdown()
        if cd is not None:
            self.countdown_var.set(countdown_text(cd))
        self._tick_id = self.after(TICK_MS, self._tick)

    def refresh_all(self):
        """Refresh every view from a fresh snapshot"""
        if self.dashboard.user is None:
            return
        snap = self.dashboard.snapshot()
        user = snap.user

        self.title_var.set(f"{snap.trip.trip_name} Trip Tracker")
        self.welcome_var.set(f"Welcome, {user.name} ({user.role})")
        self.total_var.set(f"Total Planned Cost: {format_money(snap.trip.total_cost)}")
        self.per_head_var.set(f"Per Head Contribution: {format_money(snap.trip.per_head)}")
        self.my_var.set(
            f"You paid {format_money(snap.my_paid)} - {snap.my_status}"
            f" (due {format_money(snap.my_amount_due)})"
        )
        self.countdown_var.set(countdown_text(snap.countdown))

        for iid in self.exp_tree.get_children():
            self.exp_tree.delete(iid)
        for e in snap.expenses:
            self.exp_tree.insert("", "end", values=(e.category, format_money(e.cost), e.date, e.notes))
        if snap.expenses:
            self.exp_summary_var.set(
                f"Total Expenses: {format_money(snap.total_expenses)}    "
                f"Per Member Split ({snap.member_count}): {format_money(snap.per_member_split)}"
            )
        else:
            self.exp_summary_var.set("No expense records found. Please update the expense sheet.")

        for iid in self.mem_tree.get_children():
            self.mem_tree.delete(iid)
        if user.is_admin:
            self.notebook.tab(self.tab_members, state="normal")
            for m in snap.members:
                name = f"{m.name} (You)" if m.is_current_user else m.name
                self.mem_tree.insert("", "end", tags=("you",) if m.is_current_user else (), values=(
                    name, format_money(m.paid), m.status, format_money(m.amount_due),
                ))
        else:
            self.notebook.tab(self.tab_members, state="hidden")
