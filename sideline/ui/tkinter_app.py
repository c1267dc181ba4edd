"""
Tkinter application module for the Sideline Lineup application.

This module contains the desktop window: attendance, lineup, field view and
clock controls. The window never edits state directly; it calls the match
service and redraws from ``snapshot()``.
"""
import logging
import tkinter as tk
from tkinter import ttk, messagebox
from typing import Callable, Dict, List, Optional

from ..models.formation import Orientation
from ..services import JsonFileStore, LineupError, MatchService, PersistenceError
from ..utils import APP_TITLE, DEFAULT_DATA_DIR, PLACEHOLDER, TICK_INTERVAL_MS

logger = logging.getLogger(__name__)

FIELD_PX = 420
SPOT_RADIUS = 16


class SidelineApp(tk.Tk):
    """Main application window for Sideline Lineup."""

    def __init__(self, service: MatchService):
        super().__init__()
        self.title(APP_TITLE)
        self.geometry("1180x640")
        self.service = service
        self.after_timer = None
        self.lineup_labels: Dict[str, ttk.Label] = {}
        self.attendance_vars: List[tk.BooleanVar] = []

        self._build_ui()
        self.refresh()
        self.start_auto_refresh()

    # ---------- UI Scaffolding ---------- #
    def _build_ui(self):
        top = ttk.Frame(self, padding=8)
        top.pack(fill="x")

        self.clock_var = tk.StringVar(value="00:00")
        ttk.Label(top, textvariable=self.clock_var, font=("TkDefaultFont", 20, "bold")).pack(side="left")
        self.start_btn = ttk.Button(top, text="Start", command=self.start_clock)
        self.start_btn.pack(side="left", padx=(12, 4))
        self.pause_btn = ttk.Button(top, text="Pause", command=self.pause_clock)
        self.pause_btn.pack(side="left", padx=4)
        ttk.Button(top, text="Reset", command=self.reset_clock).pack(side="left", padx=4)

        ttk.Label(top, text="Orientation").pack(side="right")
        self.orientation_var = tk.StringVar()
        orientation_box = ttk.Combobox(
            top, textvariable=self.orientation_var, state="readonly", width=8,
            values=[o.value for o in Orientation],
        )
        orientation_box.pack(side="right", padx=(4, 12))
        orientation_box.bind("<<ComboboxSelected>>", lambda _e: self.change_orientation())

        ttk.Label(top, text="Formation").pack(side="right")
        self.formation_var = tk.StringVar()
        self.formation_box = ttk.Combobox(
            top, textvariable=self.formation_var, state="readonly", width=6,
        )
        self.formation_box.pack(side="right", padx=(4, 12))
        self.formation_box.bind("<<ComboboxSelected>>", lambda _e: self.change_formation())

        body = ttk.Frame(self, padding=8)
        body.pack(fill="both", expand=True)

        roster_box = ttk.LabelFrame(body, text="Roster", padding=6)
        roster_box.pack(side="left", fill="y")
        self.roster_frame = ttk.Frame(roster_box)
        self.roster_frame.pack(fill="both", expand=True)
        ttk.Label(roster_box, text="Present").pack(anchor="w", pady=(10, 2))
        self.present_frame = ttk.Frame(roster_box)
        self.present_frame.pack(fill="x")

        lineup_box = ttk.LabelFrame(body, text="Lineup", padding=6)
        lineup_box.pack(side="left", fill="both", expand=True, padx=8)
        self.lineup_frame = ttk.Frame(lineup_box)
        self.lineup_frame.pack(fill="both", expand=True)

        self.field = tk.Canvas(body, width=FIELD_PX, height=FIELD_PX, bg="#2e7d32",
                               highlightthickness=0)
        self.field.pack(side="left")

    # ---------- Rendering ---------- #
    def refresh(self):
        """Redraw everything from a fresh snapshot."""
        snap = self.service.snapshot()
        self.formation_box.configure(values=snap["formations"])
        self.formation_var.set(snap["formation"])
        self.orientation_var.set(snap["orientation"])
        self._render_roster(snap)
        self._render_present(snap)
        self._render_lineup(snap)
        self._render_field(snap)
        self._render_clock(snap)

    def _render_clock(self, snap):
        self.clock_var.set(snap["clock"]["display"])
        running = snap["clock"]["running"]
        self.start_btn.state(["disabled"] if running else ["!disabled"])
        self.pause_btn.state(["!disabled"] if running else ["disabled"])

    def _render_roster(self, snap):
        for child in self.roster_frame.winfo_children():
            child.destroy()
        self.attendance_vars = []
        for row in snap["players"]:
            var = tk.BooleanVar(value=row["present"])
            self.attendance_vars.append(var)
            ttk.Checkbutton(
                self.roster_frame, text=row["label"], variable=var,
                command=lambda pid=row["id"], v=var: self.toggle_attendance(pid, v.get()),
            ).pack(anchor="w")

    def _render_present(self, snap):
        for child in self.present_frame.winfo_children():
            child.destroy()
        present = [p for p in snap["players"] if p["present"]]
        if not present:
            ttk.Label(self.present_frame, text="No one checked in yet.",
                      foreground="gray").pack(anchor="w")
            return
        for row in present:
            ttk.Button(
                self.present_frame, text=row["label"],
                command=lambda pid=row["id"]: self.open_assign_dialog(player_id=pid),
            ).pack(fill="x", pady=1)

    def _render_lineup(self, snap):
        for child in self.lineup_frame.winfo_children():
            child.destroy()
        self.lineup_labels = {}
        for r, entry in enumerate(snap["lineup"]):
            position = entry["position"]
            ttk.Label(self.lineup_frame, text=position, width=5).grid(row=r, column=0, sticky="w")
            label = ttk.Label(self.lineup_frame, text=entry["label"], width=28)
            label.grid(row=r, column=1, sticky="w")
            self.lineup_labels[position] = label
            ttk.Button(
                self.lineup_frame, text="Assign…",
                command=lambda pos=position: self.open_assign_dialog(position=pos),
            ).grid(row=r, column=2, padx=2)
            clear_btn = ttk.Button(
                self.lineup_frame, text="Clear",
                command=lambda pos=position: self.clear_position(pos),
            )
            clear_btn.grid(row=r, column=3, padx=2)
            if entry["player_id"] is None:
                clear_btn.state(["disabled"])

    def _render_field(self, snap):
        self.field.delete("all")
        scale = FIELD_PX / 100.0
        for entry in snap["lineup"]:
            cx, cy = entry["x"] * scale, entry["y"] * scale
            filled = entry["player_id"] is not None
            self.field.create_oval(
                cx - SPOT_RADIUS, cy - SPOT_RADIUS, cx + SPOT_RADIUS, cy + SPOT_RADIUS,
                fill="#ffffff" if filled else "", outline="#ffffff", width=2,
                tags=("spot", entry["position"]),
            )
            self.field.create_text(cx, cy, text=entry["position"],
                                   fill="#000000" if filled else "#ffffff")
            name = entry["label"] if filled else PLACEHOLDER
            self.field.create_text(cx, cy + SPOT_RADIUS + 8, text=name, fill="#ffffff",
                                   font=("TkDefaultFont", 8))
            self.field.tag_bind(
                entry["position"], "<Button-1>",
                lambda _e, pos=entry["position"]: self.open_assign_dialog(position=pos),
            )

    # ---------- Auto refresh ---------- #
    def start_auto_refresh(self):
        if self.after_timer is not None:
            self.after_cancel(self.after_timer)
        self.after_timer = self.after(TICK_INTERVAL_MS, self._auto_refresh_tick)

    def _auto_refresh_tick(self):
        # Display only: update times in place
        snap = self.service.snapshot()
        self._render_clock(snap)
        for entry in snap["lineup"]:
            label = self.lineup_labels.get(entry["position"])
            if label is not None:
                label.configure(text=entry["label"])
        self._render_field(snap)
        self.after_timer = self.after(TICK_INTERVAL_MS, self._auto_refresh_tick)

    # ---------- Actions ---------- #
    def _run(self, action: Callable[[], object]) -> bool:
        try:
            action()
        except LineupError as e:
            logger.info("Rejected: %s", e)
            messagebox.showwarning(APP_TITLE, str(e), parent=self)
            self.refresh()
            return False
        except PersistenceError as e:
            messagebox.showerror(APP_TITLE, str(e), parent=self)
            self.refresh()
            return False
        self.refresh()
        return True

    def start_clock(self):
        self._run(self.service.start)

    def pause_clock(self):
        self._run(self.service.pause)

    def reset_clock(self):
        def ask() -> bool:
            return messagebox.askyesno(
                "Reset clock",
                "Reset game clock and stop active sessions? (Totals remain)",
                parent=self,
            )

        self._run(lambda: self.service.reset(confirm=ask))

    def toggle_attendance(self, player_id: str, present: bool):
        self._run(lambda: self.service.set_attendance(player_id, present))

    def clear_position(self, position: str):
        self._run(lambda: self.service.clear(position))

    def change_formation(self):
        self._run(lambda: self.service.change_formation(self.formation_var.get()))

    def change_orientation(self):
        self._run(lambda: self.service.set_orientation(self.orientation_var.get()))

    def open_assign_dialog(self, player_id: Optional[str] = None, position: Optional[str] = None):
        snap = self.service.snapshot()
        if not snap["present"]:
            messagebox.showinfo(APP_TITLE, "No players are checked in.", parent=self)
            return
        AssignDialog(self, snap, player_id=player_id, position=position)


class AssignDialog(tk.Toplevel):
    """Pick a present player and a free (or their own) position."""

    def __init__(self, parent: SidelineApp, snap: Dict, player_id: Optional[str] = None,
                 position: Optional[str] = None):
        super().__init__(parent)
        self.app = parent
        self.title("Assign")
        self.transient(parent)
        self.resizable(False, False)

        self.players = [p for p in snap["players"] if p["present"]]
        self.held_by: Dict[str, Optional[str]] = {e["position"]: e["player_id"] for e in snap["lineup"]}
        self.order: List[str] = [e["position"] for e in snap["lineup"]]
        self.position_hint = position

        frm = ttk.Frame(self, padding=12)
        frm.pack(fill="both", expand=True)

        ttk.Label(frm, text="Player").grid(row=0, column=0, sticky="w")
        self.player_var = tk.StringVar()
        self.player_box = ttk.Combobox(
            frm, textvariable=self.player_var, state="readonly",
            values=[p["label"] for p in self.players], width=24,
        )
        self.player_box.grid(row=0, column=1, pady=4)
        self.player_box.bind("<<ComboboxSelected>>", lambda _e: self._on_player_change())

        ttk.Label(frm, text="Position").grid(row=1, column=0, sticky="w")
        self.position_var = tk.StringVar()
        self.position_box = ttk.Combobox(frm, textvariable=self.position_var,
                                         state="readonly", width=24)
        self.position_box.grid(row=1, column=1, pady=4)

        buttons = ttk.Frame(frm)
        buttons.grid(row=2, column=0, columnspan=2, pady=(10, 0), sticky="e")
        self.unassign_btn = ttk.Button(buttons, text="Unassign", command=self._unassign)
        ttk.Button(buttons, text="Cancel", command=self.destroy).pack(side="right", padx=4)
        ttk.Button(buttons, text="Save", command=self._save).pack(side="right", padx=4)

        initial = 0
        if player_id is not None:
            initial = next((i for i, p in enumerate(self.players) if p["id"] == player_id), 0)
        self.player_box.current(initial)
        self._on_player_change()
        self.grab_set()
        self.player_box.focus_set()

    def _selected_player(self) -> Optional[Dict]:
        index = self.player_box.current()
        return self.players[index] if 0 <= index < len(self.players) else None

    def _on_player_change(self):
        player = self._selected_player()
        pid = player["id"] if player else None
        allowed = [pos for pos in self.order
                   if self.held_by.get(pos) is None or self.held_by.get(pos) == pid]
        # A position picked from the field stays selectable even when occupied
        if self.position_hint and self.position_hint not in allowed:
            allowed.insert(0, self.position_hint)
        self.position_box.configure(values=allowed)

        current = player["position"] if player else None
        if self.position_hint in allowed:
            self.position_var.set(self.position_hint)
        elif current in allowed:
            self.position_var.set(current)
        elif allowed:
            self.position_var.set(allowed[0])
        else:
            self.position_var.set("")

        if current:
            self.unassign_btn.pack(side="left", padx=4)
        else:
            self.unassign_btn.pack_forget()

    def _save(self):
        player = self._selected_player()
        position = self.position_var.get()
        if not player or not position:
            return
        if self.app._run(lambda: self.app.service.assign(position, player["id"])):
            self.destroy()

    def _unassign(self):
        player = self._selected_player()
        if player:
            self.app._run(lambda: self.app.service.unassign(player["id"]))
        self.destroy()


def create_tkinter_app(data_dir: str = DEFAULT_DATA_DIR) -> SidelineApp:
    """
    Create and return the main Tkinter application.

    Args:
        data_dir: Directory holding the saved match

    Returns:
        Configured SidelineApp instance
    """
    service = MatchService(JsonFileStore(data_dir)).load()
    return SidelineApp(service)


def run_tkinter_app(data_dir: str = DEFAULT_DATA_DIR) -> None:
    """Run the Tkinter application."""
    app = create_tkinter_app(data_dir)
    app.mainloop()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run_tkinter_app()
