"""
Tkinter application module for the Courtside Match Clock.

This module contains the desktop scoreboard window and its dialogs. The clock
ticks on the Tk event loop through the session's single scheduler handle.
"""
import logging
import tkinter as tk
from datetime import datetime
from tkinter import ttk, messagebox, simpledialog
from typing import Dict, Optional

from ..services import (
    ActivationRequiredError, MatchSession, ServiceFactory, TkAfterBackend
)
from ..services.entitlement_gate import format_key
from ..utils import APP_TITLE
from ..utils.constants import MAX_PHASE_LENGTH_MIN, MIN_PHASE_LENGTH_MIN, SOUND_TYPES

logger = logging.getLogger(__name__)

CLOCK_COLOR = "#ef4444"
BREAK_COLOR = "#facc15"
SCORE_COLOR = "#facc15"
PERIOD_COLOR = "#4ade80"
BANNER_REFRESH_MS = 30 * 1000


class CourtClockApp(tk.Tk):
    """Main scoreboard window."""

    def __init__(self, factory: Optional[ServiceFactory] = None):
        super().__init__()
        self.title(APP_TITLE)
        self.geometry("960x560")
        self.configure(bg="black")

        self.session: MatchSession = (factory or ServiceFactory()).create_session(TkAfterBackend(self))
        self.session.on_change(self.refresh)
        self.session.on_sound(self.bell)
        self.banner_timer = None
        self._drag_start: Dict[str, float] = {}

        self._build_menu()
        self._build_ui()
        self.protocol("WM_DELETE_WINDOW", self.quit_app)
        self.refresh()
        self.start_banner_refresh()
        self.after_idle(self.check_entitlement)

    # ---------- UI Scaffolding ---------- #
    def _build_menu(self):
        mbar = tk.Menu(self)
        matchm = tk.Menu(mbar, tearoff=0)
        matchm.add_command(label="Start / Pause", command=self.toggle)
        matchm.add_command(label="Skip Phase", command=self.skip)
        matchm.add_command(label="Reset Match…", command=self.reset_match)
        matchm.add_separator()
        matchm.add_command(label="Record Result", command=self.record_result)
        matchm.add_command(label="Match History…", command=self.show_history)
        matchm.add_separator()
        matchm.add_command(label="Quit", command=self.quit_app)
        mbar.add_cascade(label="Match", menu=matchm)

        setupm = tk.Menu(mbar, tearoff=0)
        setupm.add_command(label="Settings…", command=self.edit_settings)
        self.mute_var = tk.BooleanVar(value=self.session.muted)
        setupm.add_checkbutton(label="Mute Sound", variable=self.mute_var, command=self.toggle_mute)
        setupm.add_command(label="Home Team…", command=lambda: self.edit_team("home"))
        setupm.add_command(label="Guest Team…", command=lambda: self.edit_team("guest"))
        setupm.add_separator()
        setupm.add_command(label="Save Profile…", command=self.save_profile)
        setupm.add_command(label="Profiles…", command=self.show_profiles)
        mbar.add_cascade(label="Setup", menu=setupm)

        licensem = tk.Menu(mbar, tearoff=0)
        licensem.add_command(label="Activate…", command=self.open_activation)
        mbar.add_cascade(label="License", menu=licensem)

        self.config(menu=mbar)

    def _build_ui(self):
        self.banner_var = tk.StringVar()
        self.banner = tk.Label(self, textvariable=self.banner_var, bg="#3b2f00", fg="#eab308")
        self.banner.pack(fill="x")

        self.clock_var = tk.StringVar()
        self.clock_label = tk.Label(self, textvariable=self.clock_var, font=("Courier", 72, "bold"),
                                    bg="black", fg=CLOCK_COLOR)
        self.clock_label.pack(pady=(20, 0))

        controls = tk.Frame(self, bg="black")
        controls.pack(pady=8)
        ttk.Button(controls, text="Reset", command=self.reset_match).pack(side="left", padx=12)
        self.toggle_btn = ttk.Button(controls, text="Start", command=self.toggle)
        self.toggle_btn.pack(side="left", padx=12)
        ttk.Button(controls, text="Skip", command=self.skip).pack(side="left", padx=12)

        row = tk.Frame(self, bg="black")
        row.pack(fill="both", expand=True)
        self.name_vars = {"home": tk.StringVar(), "guest": tk.StringVar()}
        self.score_vars = {"home": tk.StringVar(), "guest": tk.StringVar()}
        self.name_labels = {}

        for col, side in ((0, "home"), (2, "guest")):
            frame = tk.Frame(row, bg="black")
            frame.grid(row=0, column=col, sticky="nsew")
            name = tk.Label(frame, textvariable=self.name_vars[side], font=("Helvetica", 18, "bold"),
                            bg="black")
            name.pack()
            name.bind("<Button-1>", lambda _e, s=side: self.edit_team(s))
            self.name_labels[side] = name

            score = tk.Label(frame, textvariable=self.score_vars[side], font=("Courier", 96, "bold"),
                             bg="black", fg=SCORE_COLOR, cursor="sb_v_double_arrow")
            score.pack()
            score.bind("<ButtonPress-1>", lambda e, s=side: self._drag_start.__setitem__(s, e.y_root))
            score.bind("<ButtonRelease-1>", lambda e, s=side: self._end_drag(s, e.y_root))

            steps = tk.Frame(frame, bg="black")
            steps.pack()
            ttk.Button(steps, text="−", width=3, command=lambda s=side: self.adjust(s, -1)).pack(side="left")
            ttk.Button(steps, text="+", width=3, command=lambda s=side: self.adjust(s, 1)).pack(side="left")

        middle = tk.Frame(row, bg="black")
        middle.grid(row=0, column=1, sticky="nsew")
        tk.Label(middle, text="QUARTER", font=("Helvetica", 14, "bold"), bg="black", fg="white").pack()
        self.period_var = tk.StringVar()
        tk.Label(middle, textvariable=self.period_var, font=("Helvetica", 48), bg="black",
                 fg=PERIOD_COLOR).pack()

        for col in range(3):
            row.columnconfigure(col, weight=1)

    # ---------- Rendering ---------- #
    def refresh(self):
        snap = self.session.snapshot()
        clock = snap["clock"]
        self.clock_var.set(clock["display"])
        self.clock_label.configure(fg=BREAK_COLOR if clock["is_break"] else CLOCK_COLOR)
        self.toggle_btn.configure(text="Pause" if clock["is_running"] else "Start")
        self.period_var.set(clock["period_label"])

        for side in ("home", "guest"):
            team = snap[f"{side}_team"]
            self.name_vars[side].set(team["name"])
            self.name_labels[side].configure(fg=team["text_color"])
            self.score_vars[side].set(str(team["score"]))

        status = snap["entitlement"]
        if status["is_activated"]:
            self.banner_var.set("")
            self.banner.pack_forget()
        else:
            self.banner_var.set(f"TRIAL PERIOD: {status['trial_minutes_remaining']} MINUTES REMAINING")
            if not self.banner.winfo_ismapped():
                self.banner.pack(fill="x", before=self.clock_label)

    def start_banner_refresh(self):
        """Refresh the trial banner and gate on the Tk loop."""
        if self.banner_timer:
            self.after_cancel(self.banner_timer)
        self.banner_timer = self.after(BANNER_REFRESH_MS, self._banner_tick)

    def _banner_tick(self):
        self.banner_timer = None
        if self.check_entitlement():
            self.start_banner_refresh()

    # ---------- Actions ---------- #
    def _guarded(self, action, *args):
        try:
            return action(*args)
        except ActivationRequiredError:
            self.check_entitlement()
        except ValueError as e:
            messagebox.showerror(APP_TITLE, str(e), parent=self)
        return None

    def toggle(self):
        self._guarded(self.session.toggle)

    def skip(self):
        self._guarded(self.session.skip)

    def reset_match(self):
        if messagebox.askyesno("Reset Game?", "Reset the clock and both scores?", parent=self):
            self._guarded(self.session.reset_match)

    def adjust(self, side: str, delta: int):
        self._guarded(self.session.adjust_score, side, delta)

    def _end_drag(self, side: str, end_y: float):
        start_y = self._drag_start.pop(side, None)
        if start_y is not None:
            self._guarded(self.session.swipe_score, side, start_y, end_y)

    def toggle_mute(self):
        self.session.set_muted(self.mute_var.get())

    def record_result(self):
        self.session.record_current_game()
        messagebox.showinfo(APP_TITLE, "Result recorded", parent=self)

    def edit_settings(self):
        dialog = SettingsDialog(self, self.session.state.settings.to_json())
        if dialog.result:
            self._guarded(lambda: self.session.update_settings(**dialog.result))

    def edit_team(self, side: str):
        team = self.session.state.team(side)
        name = simpledialog.askstring(
            f"{side.title()} Team", "Team name:", initialvalue=team.name, parent=self
        )
        if name and name.strip():
            self.session.update_team(side, name=name.strip())

    def save_profile(self):
        name = simpledialog.askstring("Save Profile", "Profile name (e.g. Training):", parent=self)
        if name:
            self._guarded(self.session.save_profile, name)

    def show_profiles(self):
        ProfilesDialog(self, self.session)

    def show_history(self):
        HistoryDialog(self, self.session)

    def open_activation(self, required: bool = False):
        ActivationDialog(self, self.session, required=required)
        self.refresh()

    def check_entitlement(self) -> bool:
        """Block the window behind the activation dialog while required."""
        while self.session.activation_status().must_activate:
            dialog = ActivationDialog(self, self.session, required=True)
            if not dialog.activated:
                self.quit_app()
                return False
        self.refresh()
        return True

    def quit_app(self):
        self.session.close()
        if self.banner_timer:
            self.after_cancel(self.banner_timer)
            self.banner_timer = None
        self.destroy()


class SettingsDialog(simpledialog.Dialog):
    """Dialog for phase lengths and the boundary sound."""

    def __init__(self, parent: tk.Tk, settings: Dict[str, object]):
        self.settings = settings
        self.result: Optional[Dict[str, object]] = None
        super().__init__(parent, title="Match Settings")

    def body(self, master):  # type: ignore[override]
        self.vars = {}
        fields = (
            ("Quarter length (min)", "quarter_length"),
            ("Break length (min)", "break_length"),
            ("Halftime length (min)", "halftime_length"),
        )
        for i, (label, key) in enumerate(fields):
            ttk.Label(master, text=label).grid(row=i, column=0, sticky="w", padx=(0, 10), pady=2)
            var = tk.IntVar(value=int(self.settings[key]))
            self.vars[key] = var
            ttk.Spinbox(master, from_=MIN_PHASE_LENGTH_MIN, to=MAX_PHASE_LENGTH_MIN, width=5,
                        textvariable=var).grid(row=i, column=1, sticky="w", pady=2)

        ttk.Label(master, text="Sound").grid(row=len(fields), column=0, sticky="w", padx=(0, 10))
        self.sound_var = tk.StringVar(value=str(self.settings["sound_type"]))
        ttk.Combobox(master, textvariable=self.sound_var, values=SOUND_TYPES,
                     state="readonly").grid(row=len(fields), column=1, sticky="w")
        ttk.Label(master, text="New lengths apply from the next phase.",
                  foreground="#666").grid(row=len(fields) + 1, column=0, columnspan=2, pady=(8, 0))
        return None

    def validate(self) -> bool:
        try:
            values = {key: int(var.get()) for key, var in self.vars.items()}
        except (tk.TclError, ValueError):
            messagebox.showerror("Invalid value", "Lengths must be whole minutes.", parent=self)
            return False
        for key, minutes in values.items():
            if not MIN_PHASE_LENGTH_MIN <= minutes <= MAX_PHASE_LENGTH_MIN:
                messagebox.showerror(
                    "Invalid value",
                    f"Lengths must be between {MIN_PHASE_LENGTH_MIN} and {MAX_PHASE_LENGTH_MIN} minutes.",
                    parent=self,
                )
                return False
        self._values = values
        return True

    def apply(self) -> None:  # type: ignore[override]
        self.result = {**self._values, "sound_type": self.sound_var.get()}


class ProfilesDialog(tk.Toplevel):
    """Dialog listing saved profiles with load and delete actions."""

    def __init__(self, parent, session: MatchSession):
        super().__init__(parent)
        self.session = session
        self.title("Saved Profiles")
        self.geometry("420x320")
        self.transient(parent)

        self.listbox = tk.Listbox(self)
        self.listbox.pack(fill="both", expand=True, padx=10, pady=10)
        buttons = ttk.Frame(self)
        buttons.pack(fill="x", padx=10, pady=(0, 10))
        ttk.Button(buttons, text="Load", command=self._load).pack(side="left")
        ttk.Button(buttons, text="Delete", command=self._delete).pack(side="left", padx=6)
        ttk.Button(buttons, text="Close", command=self.destroy).pack(side="right")
        self._populate()

    def _populate(self):
        self.listbox.delete(0, tk.END)
        for profile in self.session.state.profiles:
            created = datetime.fromtimestamp(profile.created_at / 1000).strftime("%Y-%m-%d %H:%M")
            self.listbox.insert(tk.END, f"{profile.profile_name}  ({created})")

    def _selected_id(self) -> Optional[str]:
        selection = self.listbox.curselection()
        if not selection:
            return None
        return self.session.state.profiles[selection[0]].id

    def _load(self):
        profile_id = self._selected_id()
        if profile_id:
            self.session.load_profile(profile_id)
            self.destroy()

    def _delete(self):
        profile_id = self._selected_id()
        if profile_id:
            self.session.delete_profile(profile_id)
            self._populate()


class HistoryDialog(tk.Toplevel):
    """Dialog listing recorded results, newest first."""

    def __init__(self, parent, session: MatchSession):
        super().__init__(parent)
        self.session = session
        self.title("Match History")
        self.geometry("560x360")
        self.transient(parent)

        self.tree = ttk.Treeview(self, columns=("date", "home", "score", "guest"), show="headings")
        for col, label in (("date", "Date"), ("home", "Home"), ("score", "Score"), ("guest", "Guest")):
            self.tree.heading(col, text=label)
        self.tree.pack(fill="both", expand=True, padx=10, pady=10)

        buttons = ttk.Frame(self)
        buttons.pack(fill="x", padx=10, pady=(0, 10))
        ttk.Button(buttons, text="Delete", command=self._delete).pack(side="left")
        ttk.Button(buttons, text="Clear All", command=self._clear).pack(side="left", padx=6)
        ttk.Button(buttons, text="Close", command=self.destroy).pack(side="right")
        self._populate()

    def _populate(self):
        self.tree.delete(*self.tree.get_children())
        for stat in reversed(self.session.state.history):
            when = datetime.fromtimestamp(stat.timestamp / 1000).strftime("%Y-%m-%d %H:%M")
            score = f"{stat.home_config.score} - {stat.guest_config.score}"
            self.tree.insert("", tk.END, iid=stat.id,
                             values=(when, stat.home_config.name, score, stat.guest_config.name))

    def _delete(self):
        for game_id in self.tree.selection():
            self.session.delete_game(game_id)
        self._populate()

    def _clear(self):
        if messagebox.askyesno("Clear History", "Delete all recorded results?", parent=self):
            self.session.clear_history()
            self._populate()


class ActivationDialog(simpledialog.Dialog):
    """Dialog showing the device id and accepting an activation key."""

    def __init__(self, parent: tk.Tk, session: MatchSession, required: bool = False):
        self.session = session
        self.required = required
        self.activated = False
        super().__init__(parent, title="License Required" if required else "Activate Application")

    def body(self, master):  # type: ignore[override]
        status = self.session.activation_status()
        ttk.Label(master, text="4-Month Subscription Activation",
                  font=("Helvetica", 11, "bold")).grid(row=0, column=0, columnspan=2, pady=(0, 8))
        ttk.Label(master, text="Device ID:").grid(row=1, column=0, sticky="w")
        device = ttk.Entry(master, width=20)
        device.insert(0, self.session.gate.device_id)
        device.configure(state="readonly")
        device.grid(row=1, column=1, sticky="w")

        if status.is_activated and not status.license_expired:
            note = f"Licensed, {status.license_days_remaining} days remaining"
        elif status.license_expired:
            note = "License expired"
        else:
            note = f"Trial: {status.trial_minutes_remaining} minutes remaining"
        ttk.Label(master, text=note).grid(row=2, column=0, columnspan=2, sticky="w", pady=6)

        ttk.Label(master, text="Activation key:").grid(row=3, column=0, sticky="w")
        self.key_var = tk.StringVar()
        entry = ttk.Entry(master, textvariable=self.key_var, width=22)
        entry.grid(row=3, column=1, sticky="w")
        return entry

    def validate(self) -> bool:
        if self.session.activate(self.key_var.get()):
            return True
        messagebox.showerror(
            "Invalid key", f"'{format_key(self.key_var.get())}' is not valid for this device.", parent=self
        )
        return False

    def apply(self) -> None:  # type: ignore[override]
        self.activated = True


def create_tkinter_app(factory: Optional[ServiceFactory] = None) -> CourtClockApp:
    """
    Create and return the main Tkinter application.

    Returns:
        Configured CourtClockApp instance
    """
    return CourtClockApp(factory)


def run_tkinter_app() -> None:
    """Run the Tkinter application."""
    app = create_tkinter_app()
    app.mainloop()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run_tkinter_app()
