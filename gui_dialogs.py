"""
Dialog windows for Trip Tracker GUI
"""
from __future__ import annotations
from typing import Optional

try:
    import tkinter as tk
    from tkinter import ttk
except ModuleNotFoundError:
    tk = None
    ttk = None

from dashboard import TripDashboard
from errors import AuthError
from models import User


class LoginDialog(tk.Toplevel):
    """Dialog asking for member name and password"""

    def __init__(self, master, dashboard: TripDashboard):
        super().__init__(master)
        self.title("Trip Login")
        self.resizable(False, False)
        self.dashboard = dashboard
        self.result: Optional[User] = None

        self._bind_enter_to_ok()

        names = [u.name for u in dashboard.users]

        frm = ttk.Frame(self, padding=10)
        frm.grid(row=0, column=0, sticky="nsew")

        self.v_name = tk.StringVar(value=names[0] if names else "")
        self.v_pass = tk.StringVar(value="")
        self.v_error = tk.StringVar(value="")

        ttk.Label(frm, text="Name").grid(row=0, column=0, sticky="w", pady=2)
        ttk.Combobox(frm, textvariable=self.v_name, values=names,
                     width=22, state="readonly").grid(row=0, column=1, sticky="w")

        ttk.Label(frm, text="Password").grid(row=1, column=0, sticky="w", pady=2)
        pw = ttk.Entry(frm, textvariable=self.v_pass, width=24, show="*")
        pw.grid(row=1, column=1, sticky="w")
        pw.focus_set()

        ttk.Label(frm, textvariable=self.v_error, foreground="#ef4444").grid(
            row=2, column=0, columnspan=2, sticky="w", pady=(6, 0)
        )

        # clear the error as soon as the user types again
        self.v_pass.trace_add("write", lambda *_: self.v_error.set(""))
        self.v_name.trace_add("write", lambda *_: self.v_error.set(""))

        btns = ttk.Frame(frm)
        btns.grid(row=3, column=0, columnspan=2, sticky="e", pady=(10, 0))
        ttk.Button(btns, text="Login", command=self._ok).grid(row=0, column=0, padx=4)
        ttk.Button(btns, text="Cancel", command=self._cancel).grid(row=0, column=1, padx=4)

        self.grab_set()
        self.transient(master)

    def _bind_enter_to_ok(self):
        """Bind Enter/Return to Login"""

        def on_enter(event=None):
            self._ok()
            return "break"

        self.bind("<Return>", on_enter)
        self.bind("<KP_Enter>", on_enter)

    def _ok(self):
        """Check credentials; stay open on mismatch"""
        try:
            self.result = self.dashboard.login(self.v_name.get(), self.v_pass.get())
        except AuthError as ex:
            self.v_pass.set("")
            self.v_error.set(str(ex))
            return
        self.destroy()

    def _cancel(self):
        """Cancel and close"""
        self.result = None
        self.destroy()
