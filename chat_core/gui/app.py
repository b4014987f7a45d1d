import asyncio
import tkinter as tk
from tkinter import messagebox, scrolledtext, simpledialog
from typing import Optional

from chat_core.api.service import ChatApp, build_app
from chat_core.domain.exceptions import NothingToExportError, ValidationError
from chat_core.domain.models import Message, Theme
from chat_core.infrastructure.logging.logger import logger


PALETTES = {
    Theme.DARK: {"bg": "#1e1f22", "fg": "#e8eaed", "panel": "#2b2d31", "user": "#8ab4f8", "ai": "#81c995", "muted": "#9aa0a6"},
    Theme.LIGHT: {"bg": "#ffffff", "fg": "#202124", "panel": "#f1f3f4", "user": "#1a73e8", "ai": "#188038", "muted": "#5f6368"},
}

POLL_INTERVAL = 0.02


class TkRenderer:
    """Renderer 的 tkinter 实现，所有调用都在 Tk 主线程上。"""

    def __init__(self, app: "App"):
        self._app = app
        self._typing_index: Optional[str] = None
        self._welcome_shown = False

    def _insert(self, text: str, tag: str) -> None:
        chat = self._app.chat
        chat.config(state=tk.NORMAL)
        chat.insert(tk.END, text, tag)
        chat.config(state=tk.DISABLED)
        chat.see(tk.END)

    def render_message(self, message: Message) -> None:
        if self._welcome_shown:
            self._clear_text()
            self._welcome_shown = False
        label = self._app.labels.role_label(message.role)
        self._insert(f"{label}:\n", f"{message.role}_label")
        self._insert(f"{message.content}\n\n", message.role)

    def clear_messages(self) -> None:
        self._clear_text()
        self._typing_index = None
        labels = self._app.labels
        self._insert(f"{labels.welcome_title}\n", "welcome_title")
        self._insert(f"{labels.welcome_body}\n", "welcome")
        self._welcome_shown = True

    def _clear_text(self) -> None:
        chat = self._app.chat
        chat.config(state=tk.NORMAL)
        chat.delete("1.0", tk.END)
        chat.config(state=tk.DISABLED)

    def show_typing(self) -> None:
        self._typing_index = self._app.chat.index("end-1c")
        self._insert(f"{self._app.labels.ai}: ...\n", "typing")

    def hide_typing(self) -> None:
        if self._typing_index is None:
            return
        chat = self._app.chat
        chat.config(state=tk.NORMAL)
        chat.delete(self._typing_index, tk.END)
        chat.config(state=tk.DISABLED)
        self._typing_index = None

    def set_status(self, text: str) -> None:
        self._app.status.config(text=text)

    def set_busy(self, busy: bool) -> None:
        self._app.send_btn.config(state=tk.DISABLED if busy else tk.NORMAL)

    def set_listening(self, active: bool) -> None:
        palette = PALETTES[self._app.chat_app.session.config.theme]
        self._app.voice_btn.config(bg="#d93025" if active else palette["panel"])

    def set_input_text(self, text: str) -> None:
        self._app.entry.delete("1.0", tk.END)
        self._app.entry.insert("1.0", text)

    def apply_theme(self, theme: Theme) -> None:
        p = PALETTES[theme]
        app = self._app
        app.root.config(bg=p["bg"])
        for frame in (app.toolbar, app.input_row):
            frame.config(bg=p["panel"])
        app.chat.config(bg=p["bg"], fg=p["fg"], insertbackground=p["fg"])
        app.entry.config(bg=p["panel"], fg=p["fg"], insertbackground=p["fg"])
        app.status.config(bg=p["panel"], fg=p["muted"])
        for btn in app.buttons:
            btn.config(bg=p["panel"], fg=p["fg"], activebackground=p["bg"])
        app.chat.tag_config("user_label", foreground=p["user"], font=("TkDefaultFont", 10, "bold"))
        app.chat.tag_config("ai_label", foreground=p["ai"], font=("TkDefaultFont", 10, "bold"))
        app.chat.tag_config("typing", foreground=p["muted"])
        app.chat.tag_config("welcome_title", foreground=p["fg"], font=("TkDefaultFont", 16, "bold"), justify=tk.CENTER)
        app.chat.tag_config("welcome", foreground=p["muted"], justify=tk.CENTER)

    def prompt_for_api_key(self) -> None:
        self._app.root.after(0, self._app.open_settings)

    def alert(self, text: str) -> None:
        messagebox.showwarning(self._app.labels.welcome_title, text, parent=self._app.root)


class App:
    def __init__(self, root: tk.Tk):
        self.root = root
        self.renderer = TkRenderer(self)
        self.chat_app: ChatApp = build_app(renderer=self.renderer)
        self.labels = self.chat_app.labels
        self._tasks: set[asyncio.Task] = set()
        self._closed = False

        labels = self.labels
        self.root.title(labels.welcome_title)
        self.root.protocol("WM_DELETE_WINDOW", self.close)

        self.toolbar = tk.Frame(root)
        self.toolbar.pack(fill=tk.X)
        self.theme_btn = tk.Button(self.toolbar, text=labels.theme, command=self.on_toggle_theme)
        self.export_btn = tk.Button(self.toolbar, text=labels.export, command=self.on_export)
        self.clear_btn = tk.Button(self.toolbar, text=labels.clear, command=self.on_clear)
        self.settings_btn = tk.Button(self.toolbar, text=labels.settings, command=self.open_settings)
        for btn in (self.settings_btn, self.theme_btn, self.clear_btn, self.export_btn):
            btn.pack(side=tk.RIGHT, padx=2, pady=2)

        self.chat = scrolledtext.ScrolledText(root, width=80, height=24, wrap=tk.WORD, state=tk.DISABLED)
        self.chat.pack(fill=tk.BOTH, expand=True)

        self.input_row = tk.Frame(root)
        self.input_row.pack(fill=tk.X)
        self.entry = tk.Text(self.input_row, height=3, wrap=tk.WORD)
        self.entry.pack(side=tk.LEFT, fill=tk.X, expand=True)
        self.entry.bind("<Return>", self.on_enter)
        self.voice_btn = tk.Button(self.input_row, text=labels.voice, command=self.on_voice)
        self.voice_btn.pack(side=tk.LEFT)
        self.send_btn = tk.Button(self.input_row, text=labels.send, command=self.on_send)
        self.send_btn.pack(side=tk.LEFT)

        self.status = tk.Label(root, text=labels.ready, anchor=tk.W)
        self.status.pack(fill=tk.X)

        self.buttons = [self.theme_btn, self.export_btn, self.clear_btn, self.settings_btn, self.voice_btn, self.send_btn]
        self.renderer.clear_messages()

    # ---- 事件循环 ----

    def run(self) -> None:
        asyncio.run(self._main())

    async def _main(self) -> None:
        self.chat_app.controller.startup()
        while not self._closed:
            self.root.update()
            await asyncio.sleep(POLL_INTERVAL)
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        # 等任务的 finally（复位忙碌、聆听状态）跑完，再销毁窗口
        await asyncio.gather(*tasks, return_exceptions=True)
        self.root.destroy()

    def close(self) -> None:
        self._closed = True

    def _spawn(self, coro) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Background task failed: {exc}", exc_info=exc)
            if not self._closed:
                self.renderer.set_status(self.labels.error_status)

    # ---- 界面事件 ----

    def on_send(self) -> None:
        text = self.entry.get("1.0", tk.END).strip()
        if not text or self.chat_app.session.processing:
            return
        if self.chat_app.session.config.has_api_key:
            self.entry.delete("1.0", tk.END)
        self._spawn(self.chat_app.orchestrator.submit(text))

    def on_enter(self, event):
        if event.state & 0x1:  # Shift+Enter 换行
            return None
        self.on_send()
        return "break"

    def on_voice(self) -> None:
        self._spawn(self.chat_app.voice.handle())

    def on_clear(self) -> None:
        if messagebox.askyesno(self.labels.clear, self.labels.confirm_clear, parent=self.root):
            self.chat_app.controller.clear_conversation()

    def on_toggle_theme(self) -> None:
        self.chat_app.controller.toggle_theme()

    def on_export(self) -> None:
        try:
            path = self.chat_app.controller.export_conversation()
        except NothingToExportError as e:
            self.renderer.alert(e.message)
            return
        self.status.config(text=f"{self.labels.exported}: {path}")

    def open_settings(self) -> None:
        current = self.chat_app.session.config.api_key
        while True:
            value = simpledialog.askstring(
                self.labels.settings,
                self.labels.api_key_prompt,
                initialvalue=current,
                show="*",
                parent=self.root,
            )
            if value is None:
                return
            try:
                self.chat_app.controller.save_api_key(value)
                return
            except ValidationError as e:
                self.renderer.alert(e.message)


def main() -> None:
    root = tk.Tk()
    App(root).run()


if __name__ == "__main__":
    main()
