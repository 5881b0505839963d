# umrah_core/ui.py
import shutil
import sys
from typing import List

import arabic_reshaper
from bidi.algorithm import get_display
from colorama import Fore, Style

from umrah_core.guide import GuideSession
from umrah_core.models import DuaEntry, Theme

RITUAL_TITLES = {
    "tawaf": "Tawaf",
    "sai": "Sa'i",
}


class GuideUI:
    """Terminal rendering for the round browser."""

    def __init__(self, session: GuideSession, term_size=None):
        self.session = session
        self.term_size = term_size or shutil.get_terminal_size()
        self.arabic_reversed = False

    def fix_arabic_text(self, text: str) -> str:
        """Reshapes and applies BiDi algorithm, optionally reversing for display."""
        if not text:
            return ""
        try:
            bidi_text = str(get_display(arabic_reshaper.reshape(text)))
        except Exception as e:
            print(f"{Fore.YELLOW}Warning: Error processing Arabic text ('{text[:20]}...'): {e}{Style.RESET_ALL}",
                  file=sys.stderr)
            return text
        if self.arabic_reversed:
            return bidi_text[::-1]
        return bidi_text

    def wrap_text(self, text: str, width: int) -> str:
        """Wrap text to specified width"""
        words = text.split()
        lines = []
        current_line = []
        current_length = 0

        for word in words:
            if current_line and current_length + len(word) + 1 > width:
                lines.append(' '.join(current_line))
                current_line = []
                current_length = 0
            current_line.append(word)
            current_length += len(word) + 1

        if current_line:
            lines.append(' '.join(current_line))

        return '\n'.join(lines)

    def _print_wrapped(self, text: str):
        for paragraph in text.split('\n'):
            for line in self.wrap_text(paragraph, max(20, self.term_size.columns - 4)).split('\n'):
                print("    " + line)

    def display_dua(self, index: int, dua: DuaEntry):
        title = f"\n[{index}]"
        if dua.label:
            title += f" {Fore.YELLOW}★ {dua.label}"
        print(Style.BRIGHT + Fore.GREEN + title)

        if dua.arabic:
            print(Style.BRIGHT + Fore.RED + "Arabic:" + Style.NORMAL + Fore.WHITE)
            print("    " + self.fix_arabic_text(dua.arabic))
        if dua.transliteration:
            print(Style.BRIGHT + Fore.RED + "\nTransliteration:" + Style.NORMAL + Fore.WHITE)
            self._print_wrapped(dua.transliteration)
        if dua.translation:
            print(Style.BRIGHT + Fore.MAGENTA + "\nTranslation:" + Style.NORMAL + Fore.WHITE)
            self._print_wrapped(dua.translation)
        if dua.source:
            print(Style.DIM + Fore.WHITE + f"\n    Source: {dua.source}")

        print(Style.BRIGHT + Fore.GREEN + "\n" + "-" * min(40, self.term_size.columns))

    def display_round(self, kind: str, number: int):
        theme: Theme = self.session.theme_for(kind, number)
        duas: List[DuaEntry] = self.session.duas_for_round(kind, number)
        done = self.session.is_complete(kind, number)

        status = Fore.GREEN + "✓ completed" if done else Fore.YELLOW + "pending"
        print(Fore.RED + "╭─ " + Style.BRIGHT + Fore.GREEN + f"{RITUAL_TITLES.get(kind, kind)} {number}: {theme.title}"
              + Style.NORMAL + Fore.WHITE + f" [{status}{Fore.WHITE}]")
        if theme.description:
            print(Fore.RED + "│ " + Fore.WHITE + theme.description)
        print(Fore.RED + "╰────────────────────────────────────────")

        if not duas:
            print(Fore.YELLOW + "\nNo duas for this round. Make your own dua.")
        for i, dua in enumerate(duas, start=1):
            self.display_dua(i, dua)

        if theme.suggestions:
            print(Style.BRIGHT + Fore.CYAN + "\nSuggestions:")
            for suggestion in theme.suggestions:
                print(Fore.CYAN + "  • " + Fore.WHITE + suggestion)

    def display_progress(self, kind: str):
        rounds = self.session.rounds(kind)
        marks = []
        for entry in rounds:
            if self.session.is_complete(kind, entry.number):
                marks.append(Fore.GREEN + f"{entry.number}✓")
            else:
                marks.append(Fore.WHITE + str(entry.number))
        done = sum(1 for entry in rounds if self.session.is_complete(kind, entry.number))
        print(Fore.RED + "├─ " + Fore.CYAN + f"{RITUAL_TITLES.get(kind, kind)}".ljust(6) + Fore.WHITE + " : "
              + " ".join(marks) + Fore.WHITE + f"  ({done}/{len(rounds)})" + Style.RESET_ALL)
