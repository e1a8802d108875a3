"""Remote image resizer GUI.

Pick one image, choose presets and/or custom sizes, and let the remote
service produce every variant.  The window is pumped from the asyncio event
loop so the upload never blocks the UI and no worker threads are needed.

Usage:
    uv run python -m remote_resizer.gui_app

A convenience entry point `remote-resizer` is also provided if installed as a package.
"""
from __future__ import annotations

import asyncio
import io
from pathlib import Path
from tkinter import filedialog
from typing import Any, Dict, List, Optional

import customtkinter
from loguru import logger
from PIL import Image

from .downloads import decode_data_uri
from .errors import DownloadError
from .input_sources import first_dropped_file, parse_drop_paths
from .notifications import Notification, NotificationManager
from .resize_service import HttpResizeService, ImageRef
from .runtime_logging import create_run_log_artifacts, setup_logging
from .selection_store import SelectionSnapshot
from .session import ResizeSession
from .settings_store import SettingsStore
from .submission import SubmissionState
from .targets import OUTPUT_FORMATS, PRESET_NAMES, format_label
from .text_presenter import (
    build_preset_summary_text,
    build_result_summary_text,
    build_selected_file_text,
    build_submit_button_text,
)

try:
    from tkinterdnd2 import DND_FILES, TkinterDnD

    TKDND_AVAILABLE = True
    _WINDOW_BASES: tuple = (customtkinter.CTk, TkinterDnD.DnDWrapper)
except ImportError:
    DND_FILES = None
    TkinterDnD = None
    TKDND_AVAILABLE = False
    _WINDOW_BASES = (customtkinter.CTk,)

UI_POLL_INTERVAL = 1 / 60
THUMBNAIL_SIZE = (160, 160)
IMAGE_FILETYPES = [
    ("Images", "*.jpg *.jpeg *.png *.webp *.gif *.bmp *.tif *.tiff"),
    ("All files", "*.*"),
]

# -------------------- UI color constants --------------------
UI_COLORS = {
    "primary": ("#16a34a", "#15803d"),
    "link": ("#2563eb", "#60a5fa"),
    "danger": ("#dc2626", "#f87171"),
    "drop_active": ("#f0fdf4", "#14532d"),
    "snackbar_error": ("#f87171", "#b91c1c"),
    "snackbar_info": ("#22c55e", "#15803d"),
}


class ResizerApp(*_WINDOW_BASES):  # type: ignore[misc]
    def __init__(
        self,
        session: ResizeSession,
        *,
        settings: Dict[str, Any],
        settings_store: Optional[SettingsStore] = None,
    ) -> None:
        super().__init__()
        self.session = session
        self.settings = settings
        self.settings_store = settings_store
        self._running = False
        self._background_tasks: set[asyncio.Task] = set()
        self._custom_rows: List[Dict[str, Any]] = []
        self._thumbnails: List[customtkinter.CTkImage] = []

        self.title("Image Resizer")
        self.geometry(str(settings.get("window_geometry") or "900x760"))
        self.minsize(640, 560)
        self.protocol("WM_DELETE_WINDOW", self._on_close)

        self.font_default = customtkinter.CTkFont(size=14)
        self.font_title = customtkinter.CTkFont(size=20, weight="bold")
        self.font_small = customtkinter.CTkFont(size=12)

        self._build_navbar()
        self._build_form()
        self._build_results()
        self._build_snackbar()
        self._setup_drag_and_drop()

        self.session.selection.bind("snapshot", self._render_selection)
        self.session.submission.bind("state", self._render_submission)
        self.session.notifications.bind("notification", self._render_notification)

        self._render_selection(self.session.selection.snapshot())
        self._render_submission(self.session.submission.state)
        logger.debug("ResizerApp initialized")

    # ------------------------------------------------------------------
    # layout
    # ------------------------------------------------------------------
    def _build_navbar(self) -> None:
        nav = customtkinter.CTkFrame(self, corner_radius=0)
        nav.pack(side="top", fill="x")
        customtkinter.CTkLabel(nav, text="Image Resizer", font=self.font_title).pack(side="left", padx=16, pady=10)
        self.theme_button = customtkinter.CTkButton(
            nav,
            text=self._theme_icon(),
            width=40,
            fg_color="transparent",
            command=self._toggle_dark_mode,
        )
        self.theme_button.pack(side="right", padx=16, pady=10)

    def _build_form(self) -> None:
        form = customtkinter.CTkFrame(self)
        form.pack(side="top", fill="x", padx=16, pady=(12, 6))

        customtkinter.CTkLabel(form, text="Resize your images efficiently", font=self.font_title).pack(pady=(10, 6))

        self.drop_zone = customtkinter.CTkButton(
            form,
            text=build_selected_file_text(None),
            height=72,
            fg_color="transparent",
            border_width=2,
            text_color=("gray30", "gray70"),
            command=self._select_file,
        )
        self.drop_zone.pack(fill="x", padx=12, pady=6)

        presets_row = customtkinter.CTkFrame(form, fg_color="transparent")
        presets_row.pack(fill="x", padx=12, pady=6)
        customtkinter.CTkLabel(presets_row, text="Preset Sizes", font=self.font_default).pack(side="left")
        self.preset_vars: Dict[str, customtkinter.BooleanVar] = {}
        for name in PRESET_NAMES:
            var = customtkinter.BooleanVar(value=False)
            self.preset_vars[name] = var
            customtkinter.CTkCheckBox(
                presets_row,
                text=name.capitalize(),
                variable=var,
                command=lambda n=name: self.session.toggle_preset(n),
            ).pack(side="left", padx=8)
        self.preset_summary_label = customtkinter.CTkLabel(presets_row, text="", font=self.font_small)
        self.preset_summary_label.pack(side="right")

        customtkinter.CTkLabel(form, text="Custom Sizes", font=self.font_default).pack(anchor="w", padx=12)
        self.custom_frame = customtkinter.CTkFrame(form, fg_color="transparent")
        self.custom_frame.pack(fill="x", padx=12)
        customtkinter.CTkButton(
            form,
            text="+ Add Size",
            width=100,
            fg_color="transparent",
            text_color=UI_COLORS["link"],
            command=self.session.add_custom_row,
        ).pack(anchor="w", padx=12, pady=(2, 6))

        bottom = customtkinter.CTkFrame(form, fg_color="transparent")
        bottom.pack(fill="x", padx=12, pady=(6, 12))
        customtkinter.CTkLabel(bottom, text="Output Format", font=self.font_default).pack(side="left")
        self._format_by_label = {format_label(fmt): fmt for fmt in OUTPUT_FORMATS}
        self.format_menu = customtkinter.CTkOptionMenu(
            bottom,
            values=list(self._format_by_label),
            command=lambda label: self.session.set_format(self._format_by_label[label]),  # type: ignore[arg-type]
        )
        self.format_menu.pack(side="left", padx=8)
        self.submit_button = customtkinter.CTkButton(
            bottom,
            text=build_submit_button_text(is_submitting=False),
            fg_color=UI_COLORS["primary"],
            command=self.session.submit,
        )
        self.submit_button.pack(side="right")

    def _build_results(self) -> None:
        self.result_heading = customtkinter.CTkLabel(self, text="", font=self.font_default, anchor="w")
        self.result_heading.pack(side="top", fill="x", padx=20)
        self.results_frame = customtkinter.CTkScrollableFrame(self)
        self.results_frame.pack(side="top", fill="both", expand=True, padx=16, pady=(0, 12))

    def _build_snackbar(self) -> None:
        self.snackbar = customtkinter.CTkFrame(self, corner_radius=8)
        self.snackbar_label = customtkinter.CTkLabel(self.snackbar, text="", text_color="white", wraplength=280)
        self.snackbar_label.pack(side="left", padx=(12, 6), pady=8)
        customtkinter.CTkButton(
            self.snackbar,
            text="✕",
            width=28,
            fg_color="transparent",
            text_color="white",
            command=self.session.dismiss_notification,
        ).pack(side="right", padx=(0, 8))

    def _setup_drag_and_drop(self) -> None:
        if not TKDND_AVAILABLE or TkinterDnD is None:
            logger.info("Drag and drop disabled: tkinterdnd2 unavailable")
            return
        try:
            TkinterDnD._require(self)
            self.drop_target_register(DND_FILES)
            self.dnd_bind("<<DropEnter>>", self._on_drop_enter)
            self.dnd_bind("<<DropLeave>>", self._on_drop_leave)
            self.dnd_bind("<<Drop>>", self._on_drop_files)
        except Exception as exc:
            logger.warning(f"Drag and drop initialization failed: {exc}")
            return
        logger.info("Drag and drop enabled")

    # ------------------------------------------------------------------
    # rendering
    # ------------------------------------------------------------------
    def _render_selection(self, snapshot: SelectionSnapshot) -> None:
        self.drop_zone.configure(text=build_selected_file_text(snapshot.file))
        for name, var in self.preset_vars.items():
            var.set(name in snapshot.presets)
        self.preset_summary_label.configure(text=build_preset_summary_text(snapshot.presets))
        self.format_menu.set(format_label(snapshot.output_format))
        self.settings["output_format"] = snapshot.output_format
        if len(self._custom_rows) != len(snapshot.custom_sizes):
            self._rebuild_custom_rows(snapshot)

    def _rebuild_custom_rows(self, snapshot: SelectionSnapshot) -> None:
        for row in self._custom_rows:
            row["frame"].destroy()
        self._custom_rows = []

        removable = len(snapshot.custom_sizes) > 1
        for index, size in enumerate(snapshot.custom_sizes):
            frame = customtkinter.CTkFrame(self.custom_frame, fg_color="transparent")
            frame.pack(fill="x", pady=2)
            width_var = customtkinter.StringVar(value=size.width)
            height_var = customtkinter.StringVar(value=size.height)
            customtkinter.CTkEntry(frame, textvariable=width_var, placeholder_text="Width", width=110).pack(side="left")
            customtkinter.CTkEntry(frame, textvariable=height_var, placeholder_text="Height", width=110).pack(
                side="left", padx=6
            )
            width_var.trace_add("write", lambda *_a, i=index, v=width_var: self.session.edit_custom_size(i, "width", v.get()))
            height_var.trace_add("write", lambda *_a, i=index, v=height_var: self.session.edit_custom_size(i, "height", v.get()))
            if removable:
                customtkinter.CTkButton(
                    frame,
                    text="✕",
                    width=28,
                    fg_color="transparent",
                    text_color=UI_COLORS["danger"],
                    command=lambda i=index: self.session.remove_custom_row(i),
                ).pack(side="left")
            self._custom_rows.append({"frame": frame, "width": width_var, "height": height_var})

    def _render_submission(self, state: SubmissionState) -> None:
        self.submit_button.configure(
            text=build_submit_button_text(is_submitting=state.is_submitting),
            state="disabled" if state.is_submitting else "normal",
        )
        self.result_heading.configure(text=build_result_summary_text(state))
        if state.is_submitting or state.is_succeeded:
            self._clear_results()
        if state.is_succeeded and state.result is not None:
            self._add_result_card("Original Image", state.result.original, "Download Original")
            for label, ref in state.result.variants.items():
                self._add_result_card(label, ref, "Download")

    def _clear_results(self) -> None:
        for child in self.results_frame.winfo_children():
            child.destroy()
        self._thumbnails.clear()

    def _add_result_card(self, title: str, ref: ImageRef, button_text: str) -> None:
        card = customtkinter.CTkFrame(self.results_frame)
        card.pack(fill="x", padx=4, pady=4)
        customtkinter.CTkLabel(card, text=title, font=self.font_default).pack(anchor="w", padx=8, pady=(6, 2))
        thumbnail = self._load_thumbnail(ref)
        if thumbnail is not None:
            self._thumbnails.append(thumbnail)
            customtkinter.CTkLabel(card, text="", image=thumbnail).pack(anchor="w", padx=8)
        customtkinter.CTkButton(
            card,
            text=button_text,
            width=120,
            fg_color="transparent",
            text_color=UI_COLORS["link"],
            command=lambda r=ref: self._download(r),
        ).pack(anchor="w", padx=8, pady=(2, 6))

    @staticmethod
    def _load_thumbnail(ref: ImageRef) -> Optional[customtkinter.CTkImage]:
        if not ref.uri.startswith("data:"):
            return None
        try:
            _media_type, payload = decode_data_uri(ref.uri)
            with Image.open(io.BytesIO(payload)) as source:
                image = source.copy()
        except (DownloadError, OSError) as exc:
            logger.warning(f"Preview unavailable for {ref.filename}: {exc}")
            return None
        image.thumbnail(THUMBNAIL_SIZE)
        return customtkinter.CTkImage(light_image=image, dark_image=image, size=image.size)

    def _render_notification(self, notification: Optional[Notification]) -> None:
        if notification is None:
            self.snackbar.place_forget()
            return
        color_key = "snackbar_error" if notification.severity == "error" else "snackbar_info"
        self.snackbar.configure(fg_color=UI_COLORS[color_key])
        self.snackbar_label.configure(text=notification.message)
        self.snackbar.place(relx=1.0, rely=1.0, x=-16, y=-16, anchor="se")
        self.snackbar.lift()

    # ------------------------------------------------------------------
    # intents
    # ------------------------------------------------------------------
    def _select_file(self) -> None:
        initial_dir = self.settings.get("last_input_dir") or str(Path.home())
        selected = filedialog.askopenfilename(
            title="Select an image",
            initialdir=initial_dir,
            filetypes=IMAGE_FILETYPES,
        )
        if selected:
            self._pick(Path(selected))

    def _pick(self, path: Path) -> None:
        if self.session.pick_file(path) is not None:
            self.settings["last_input_dir"] = str(path.parent)

    def _download(self, ref: ImageRef) -> None:
        initial_dir = self.settings.get("last_output_dir") or self.settings.get("last_input_dir") or str(Path.home())
        directory = filedialog.askdirectory(title="Save to", initialdir=initial_dir)
        if not directory:
            return
        self.settings["last_output_dir"] = directory
        task = asyncio.get_running_loop().create_task(self.session.download(ref, Path(directory)))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    def _toggle_dark_mode(self) -> None:
        mode = "light" if customtkinter.get_appearance_mode().lower() == "dark" else "dark"
        customtkinter.set_appearance_mode(mode)
        self.settings["appearance_mode"] = mode
        self.theme_button.configure(text=self._theme_icon())

    @staticmethod
    def _theme_icon() -> str:
        return "☀️" if customtkinter.get_appearance_mode().lower() == "dark" else "🌙"

    def _on_drop_enter(self, event: Any) -> Any:
        self.drop_zone.configure(fg_color=UI_COLORS["drop_active"])
        return getattr(event, "action", None)

    def _on_drop_leave(self, _event: Any) -> None:
        self.drop_zone.configure(fg_color="transparent")

    def _on_drop_files(self, event: Any) -> Any:
        self.drop_zone.configure(fg_color="transparent")
        path = first_dropped_file(parse_drop_paths(getattr(event, "data", ""), self.tk.splitlist))
        if path is not None:
            self._pick(path)
        return getattr(event, "action", None)

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------
    async def run_async(self) -> None:
        """Drive Tk from the running event loop until the window closes."""
        self._running = True
        while self._running:
            self.update()
            await asyncio.sleep(UI_POLL_INTERVAL)
        if self.session.submission.is_submitting:
            logger.info("Window closed while a submission is in flight")
        self.destroy()

    def _on_close(self) -> None:
        self.settings["window_geometry"] = self.geometry()
        if self.settings_store is not None:
            try:
                self.settings_store.save(self.settings)
            except OSError:
                logger.exception("Failed to save settings")
        self._running = False


def main() -> None:
    settings_store = SettingsStore()
    settings = settings_store.load()

    artifacts = create_run_log_artifacts()
    setup_logging(artifacts.run_log_path)
    logger.info(f"Remote resize service: {settings['api_url']}")

    customtkinter.set_appearance_mode(settings["appearance_mode"])
    customtkinter.set_default_color_theme("green")

    service = HttpResizeService(settings["api_url"], timeout=settings["request_timeout"])
    session = ResizeSession(
        service,
        notifications=NotificationManager(duration=settings["notification_seconds"]),
        output_format=settings["output_format"],
    )
    app = ResizerApp(session, settings=settings, settings_store=settings_store)
    asyncio.run(app.run_async())


if __name__ == "__main__":
    main()
