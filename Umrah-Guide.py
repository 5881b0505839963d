# Umrah-Guide.py

import sys

from colorama import Fore, Style, init

from umrah_core.config import load_settings, state_path
from umrah_core.data_store import check_references, load_tables_from_dir, report_warnings
from umrah_core.errors import ContentLoadError, RoundNotFoundError, ThemeNotFoundError
from umrah_core.guide import GuideSession
from umrah_core.state_store import StateFile
from umrah_core.ui import RITUAL_TITLES, GuideUI
from umrah_core.version import VERSION

init(autoreset=True)

KIND_ALIASES = {
    "t": "tawaf", "tawaf": "tawaf",
    "s": "sai", "sai": "sai",
}

COMMANDS = [
    ("t <n> / s <n>", "Show Tawaf round / Sa'i lap n"),
    ("done t|s <n>", "Mark a round complete"),
    ("new t|s <n>", "Pick a new random set for a round"),
    ("reset t|s", "Clear progress"),
    ("theme t|s <n> <id>", "Use another theme for a round ('-' restores)"),
    ("themes", "List available themes"),
    ("custom", "Toggle custom themes on/off"),
    ("mode", "Switch between Umrah and Nafil Tawaf"),
    ("random", "Toggle random pool duas on/off"),
    ("progress/p", "Show progress"),
    ("quit/q", "Exit"),
]


class UmrahGuideApp:
    def __init__(self):
        self.settings = load_settings()
        try:
            self.tables = load_tables_from_dir(self.settings.data_dir)
        except ContentLoadError as e:
            print(Fore.RED + f"Fatal Error: {e}", file=sys.stderr)
            print(Fore.YELLOW + "Fix the content file (see Validate-Data) and try again.", file=sys.stderr)
            sys.exit(1)
        report_warnings(check_references(self.tables))

        self.state_file = StateFile(state_path())
        self.session = GuideSession(self.tables, self.state_file.load(), persist=self.state_file.save)
        self.ui = GuideUI(self.session)

    def _display_menu(self):
        config = self.session.state.config
        print(Fore.RED + "╭─ " + Style.BRIGHT + Fore.GREEN + f"🕋 Umrah Guide v{VERSION}"
              + Style.NORMAL + Fore.WHITE + f"  mode: {config.ritual_type}, random: {'on' if config.randomize else 'off'},"
              + f" themes: {config.theme_mode}")
        width = max(len(cmd) for cmd, _ in COMMANDS)
        for cmd, desc in COMMANDS:
            print(Fore.RED + f"├─ {Fore.CYAN}{cmd.ljust(width)} {Fore.WHITE}: {desc}")
        print(Fore.RED + "╰────────────────────────────────────────")

    def _display_progress(self):
        print(Fore.RED + "╭─ " + Style.BRIGHT + Fore.GREEN + "Progress")
        for kind in RITUAL_TITLES:
            if self.session.rounds(kind):
                self.ui.display_progress(kind)
        print(Fore.RED + "╰────────────────────────────────────────")

    def _display_themes(self):
        for theme_id, theme in sorted(self.tables.themes.items()):
            print(Fore.CYAN + f"  {theme_id}" + Fore.WHITE + f" : {theme.title}")

    def _parse_round(self, args, need_number=True):
        if not args or args[0] not in KIND_ALIASES:
            raise ValueError("Expected t or s")
        kind = KIND_ALIASES[args[0]]
        if not need_number:
            return kind, None
        return kind, int(args[1])

    def handle(self, line: str) -> bool:
        """Run one command. Returns False when the user wants to quit."""
        words = line.split()
        if not words:
            return True
        command, args = words[0].lower(), words[1:]

        if command in ("quit", "q", "exit"):
            return False
        if command in ("progress", "p"):
            self._display_progress()
        elif command == "themes":
            self._display_themes()
        elif command == "random":
            self.session.set_randomization(not self.session.state.config.randomize)
            print(Fore.GREEN + f"✓ Random pool duas {'on' if self.session.state.config.randomize else 'off'}.")
        elif command == "custom":
            new_mode = "default" if self.session.state.config.theme_mode == "custom" else "custom"
            self.session.set_theme_mode(new_mode)
            print(Fore.GREEN + f"✓ Theme mode: {new_mode}.")
        elif command == "mode":
            new_type = "nafil" if self.session.mode == "umrah" else "umrah"
            self.session.set_ritual_type(new_type)
            print(Fore.GREEN + f"✓ Ritual type: {new_type}.")
        elif command in KIND_ALIASES:
            kind, number = self._parse_round([command] + args)
            self.ui.display_round(kind, number)
        elif command == "done":
            kind, number = self._parse_round(args)
            self.session.complete_round(kind, number)
            print(Fore.GREEN + f"✓ {RITUAL_TITLES[kind]} {number} completed.")
        elif command == "new":
            kind, number = self._parse_round(args)
            self.session.reshuffle(kind, number)
            self.ui.display_round(kind, number)
        elif command == "reset":
            kind, _ = self._parse_round(args, need_number=False)
            self.session.reset(kind)
            print(Fore.GREEN + f"✓ {RITUAL_TITLES[kind]} progress cleared.")
        elif command == "theme":
            kind, number = self._parse_round(args[:2])
            theme_id = args[2] if len(args) > 2 else "-"
            self.session.set_custom_theme(kind, number, None if theme_id == "-" else theme_id)
            print(Fore.GREEN + "✓ Round theme updated.")
        else:
            print(Fore.YELLOW + "Invalid option. Please try again.")
        return True

    def run(self):
        while True:
            self._display_menu()
            try:
                line = input(Fore.RED + "  ❯ " + Fore.WHITE).strip()
            except (KeyboardInterrupt, EOFError):
                print(Fore.YELLOW + "\nMay Allah accept your Umrah.")
                return
            try:
                if not self.handle(line):
                    print(Fore.YELLOW + "May Allah accept your Umrah.")
                    return
            except (ThemeNotFoundError, RoundNotFoundError) as e:
                print(Fore.RED + f"❌ {e}")
            except (ValueError, IndexError):
                print(Fore.YELLOW + "❌ Invalid round. Example: 't 3' or 'done s 2'.")


if __name__ == "__main__":
    UmrahGuideApp().run()
