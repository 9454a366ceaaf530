"""
GUI for ChatCalc
Tkinter-based calculator window driven by the shared controller
"""
import tkinter as tk
from tkinter import ttk

import config
from calculator import format_number
from chatbot import create_chatbot
from controller import BUTTON_LAYOUT, MEMORY_BUTTONS, OPERATOR_BUTTONS, CalculatorController


class ChatCalcGUI:
    def __init__(self, root, controller=None, dark_mode=False):
        self.root = root
        self.root.title(config.APP_NAME)
        self.root.geometry(f"{config.WINDOW_WIDTH}x{config.WINDOW_HEIGHT}")

        self.controller = controller or CalculatorController()
        self.chatbot = create_chatbot(self.controller)

        self.dark_mode = dark_mode
        self.T: dict = config.get_theme(self.dark_mode)
        self.root.configure(bg=self.T["bg"])
        self._toast = None

        self.create_widgets()
        self.root.bind('<Key>', self.on_key_press)
        self.update_display()

    # palette keys per button kind: (background, foreground, pressed background)
    BUTTON_STYLES = {
        "digit": ("btn_bg", "btn_fg", "bg_dark"),
        "operator": ("btn_bg", "operator_fg", "bg_dark"),
        "equals": ("equals_bg", "equals_fg", "accent"),
        "memory": ("memory_bg", "memory_fg", "shadow_dark"),
        "clear": ("danger", "equals_fg", "bg_dark"),
    }

    def _neu_btn(self, parent, text, command=None, kind="digit", font=config.BUTTON_FONT):
        """Flat keypad button coloured from the active palette"""
        bg, fg, pressed = (self.T[key] for key in self.BUTTON_STYLES[kind])
        return tk.Button(parent, text=text, command=command, font=font,
                         bg=bg, fg=fg, activebackground=self.T[pressed], activeforeground=fg,
                         relief=tk.FLAT, bd=0, cursor="hand2", highlightthickness=1,
                         highlightbackground=self.T["shadow_dark"], highlightcolor=self.T["shadow_lite"])

    def _show_toast(self, msg, duration=2000):
        """Show a short message banner under the display"""
        T = self.T
        if self._toast is not None and self._toast.winfo_exists():
            self._toast.destroy()
        self._toast = tk.Label(self.root, text=msg, font=config.LABEL_FONT,
                               bg=T["accent"], fg=T["equals_fg"], padx=8, pady=2)
        self._toast.place(relx=0.5, y=4, anchor=tk.N)
        self.root.after(duration, self._toast.destroy)

    def create_widgets(self):
        """Create display, keypad and chat bar"""
        T = self.T

        # Display area, inset card with LCD-style font
        outer = tk.Frame(self.root, bg=T["shadow_dark"], bd=0)
        outer.pack(fill=tk.X, padx=6, pady=(6, 4))
        self.display = tk.Label(
            outer, text="0", font=config.DISPLAY_FONT,
            bg=T["display_bg"], fg=T["display_fg"],
            anchor=tk.E, padx=12, pady=10
        )
        self.display.pack(fill=tk.X, padx=1, pady=1)

        self.pending_label = tk.Label(
            outer, text="", font=config.LABEL_FONT,
            bg=T["display_bg"], fg=T["subtext"], anchor=tk.E, padx=12
        )
        self.pending_label.pack(fill=tk.X, padx=1, pady=(0, 1))

        # Keypad
        keypad = tk.Frame(self.root, bg=T["bg"])
        keypad.pack(fill=tk.BOTH, expand=True, padx=4, pady=2)
        for r, row in enumerate(BUTTON_LAYOUT):
            keypad.rowconfigure(r, weight=1)
            columns = len(row)
            for c, label in enumerate(row):
                # Rows with fewer keys stretch their last key
                span = 1
                if c == columns - 1 and columns < 5:
                    span = 5 - columns + 1
                btn = self._neu_btn(keypad, label, command=lambda b=label: self.calculator_button_click(b),
                                    kind=self._button_kind(label))
                btn.grid(row=r, column=c, columnspan=span, sticky="nsew", padx=2, pady=2)
        for c in range(5):
            keypad.columnconfigure(c, weight=1)

        # Chat bar
        chat_frame = tk.Frame(self.root, bg=T["bg_dark"])
        chat_frame.pack(fill=tk.X, padx=4, pady=(2, 6))
        self.chat_var = tk.StringVar()
        self.chat_entry = ttk.Entry(chat_frame, textvariable=self.chat_var, font=config.LABEL_FONT)
        self.chat_entry.pack(side=tk.LEFT, fill=tk.X, expand=True, padx=2, pady=2)
        self.chat_entry.bind('<Return>', lambda e: self.send_chat())
        self._neu_btn(chat_frame, "Ask", command=self.send_chat, kind="memory",
                      font=config.LABEL_FONT).pack(side=tk.RIGHT, padx=2)
        self.chat_reply = tk.Label(self.root, text="", font=config.LABEL_FONT, wraplength=config.WINDOW_WIDTH - 20,
                                   bg=T["bg"], fg=T["subtext"], justify=tk.LEFT, anchor=tk.W)
        self.chat_reply.pack(fill=tk.X, padx=8, pady=(0, 4))

    @staticmethod
    def _button_kind(label):
        if label == '=':
            return "equals"
        if label in OPERATOR_BUTTONS:
            return "operator"
        if label in MEMORY_BUTTONS:
            return "memory"
        if label == 'C':
            return "clear"
        return "digit"

    def update_display(self):
        """Update the display"""
        state = self.controller.state
        self.display.config(text=state.display_value(),
                            fg=self.T["danger"] if state.is_error else self.T["display_fg"])
        if state.pending_operand is not None and state.pending_operation.symbol:
            self.pending_label.config(text=f"{format_number(state.pending_operand)} {state.pending_operation.symbol}")
        else:
            self.pending_label.config(text="")

    def calculator_button_click(self, button):
        """Handle calculator button clicks"""
        self.controller.press(button)
        self.update_display()

        if button == 'MS':
            self._show_toast("Stored in memory")
        elif button == 'M+':
            self._show_toast("Added to memory")
        elif button == 'M-':
            self._show_toast("Subtracted from memory")
        elif button == 'MC':
            self._show_toast("Memory cleared")

    def on_key_press(self, event):
        """Handle keyboard input"""
        if event.widget is self.chat_entry:
            return
        if self.controller.handle_key(event.char, event.keysym) is not None:
            self.update_display()

    def send_chat(self):
        message = self.chat_var.get().strip()
        if not message:
            return
        self.chat_var.set("")
        reply = self.chatbot.process_message(message)
        self.chat_reply.config(text=reply)
        self.update_display()
