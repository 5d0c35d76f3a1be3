"""Formatting utilities for display."""

from __future__ import annotations

from html import escape
from typing import Any

from nuzdex.core.constants import DETAIL_SECTIONS, STAT_KEYS, game_name

STATUS_BADGES = {
    "seen": "👁",
    "caught": "🔴",
    "owned": "⭐",
}

GENDER_SYMBOLS = {
    "male": "♂",
    "female": "♀",
    "genderless": "",
}

STAT_LABELS = {
    "hp": "HP",
    "attack": "Atk",
    "defense": "Def",
    "specialAttack": "SpA",
    "specialDefense": "SpD",
    "speed": "Spe",
}


def format_run_line(index: int, run: Any) -> str:
    """One line of the run list: number, name, game and active marker."""
    active = " ✅" if run.is_active else ""
    return f"{index}. <b>{escape(run.name)}</b> ({game_name(run.game)}){active}"


def format_run_details(run: Any, stats: dict[str, int] | None, party_size: int) -> str:
    """Run header with Pokedex counts and party size."""
    lines = [f"<b>{escape(run.name)}</b>", f"Game: {game_name(run.game)}"]
    if run.description:
        lines.append(f"<i>{escape(run.description)}</i>")
    if stats is not None:
        lines.append(
            f"Pokédex: {stats['total']} entries "
            f"({stats['seen']} seen, {stats['caught']} caught, {stats['owned']} owned)"
        )
    lines.append(f"Party: {party_size}/6")
    return "\n".join(lines)


def format_dex_line(entry: Any) -> str:
    """Pokedex entry line: badge, dex number, name, location."""
    badge = STATUS_BADGES.get(entry.status, "")
    line = f"{badge} #{entry.pokemon_id:04d} {escape(entry.pokemon_name.title())}"
    if entry.location:
        line += f" — {escape(entry.location)}"
    if entry.notes:
        line += f" <i>({escape(entry.notes)})</i>"
    return line


def format_stat_block(block: dict[str, Any] | None) -> str:
    """Compact 'HP 45 / Atk 49 / ...' rendering of a stat block."""
    if not block:
        return "—"
    return " / ".join(f"{STAT_LABELS[k]} {block.get(k, 0)}" for k in STAT_KEYS)


def format_party_line(member: Any) -> str:
    """Party slot line: slot, name, level, gender, shiny and fainted markers."""
    name = escape(member.display_name)
    if member.nickname:
        name += f" ({escape(member.pokemon_name.title())})"
    gender = GENDER_SYMBOLS.get(member.gender or "", "")
    shiny = "✨" if member.is_shiny else ""
    fainted = " 💀" if member.is_fainted else ""
    return f"[{member.position + 1}] {shiny}<b>{name}</b>{gender} Lv.{member.level}{fainted}"


def format_sections_menu(selected: list[str]) -> list[tuple[str, str]]:
    """(section id, button label) pairs with a check on selected ones."""
    return [
        (section, f"{'✅' if section in selected else '▫️'} {label}")
        for section, label in DETAIL_SECTIONS.items()
    ]


def format_species_summary(summary: dict[str, Any]) -> str:
    """Render a PokeAPI summary in the order of its sections."""
    lines = [f"<b>#{summary['id']:04d} {escape(summary['name'])}</b>"]
    for section, value in summary["sections"].items():
        label = DETAIL_SECTIONS.get(section, section)
        if value is None or value == [] or value == {}:
            continue
        if isinstance(value, list):
            body = ", ".join(escape(str(v)) for v in value)
        elif isinstance(value, dict):
            body = ", ".join(f"{escape(str(k))}: {escape(str(v))}" for k, v in value.items() if v is not None)
        else:
            body = escape(str(value))
        lines.append(f"\n<b>{label}</b>\n{body}")
    return "\n".join(lines)
