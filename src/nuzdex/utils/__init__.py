"""Utility functions package."""

from nuzdex.utils.formatting import (
    format_dex_line,
    format_party_line,
    format_run_details,
    format_run_line,
    format_sections_menu,
    format_species_summary,
    format_stat_block,
)

__all__ = [
    "format_run_line",
    "format_run_details",
    "format_dex_line",
    "format_party_line",
    "format_stat_block",
    "format_sections_menu",
    "format_species_summary",
]
