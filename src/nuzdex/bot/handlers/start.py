"""Start and help handlers."""

from aiogram import Router
from aiogram.filters import Command, CommandStart
from aiogram.types import Message
from sqlalchemy.ext.asyncio import AsyncSession

from nuzdex.core.runs import get_active_run
from nuzdex.utils.formatting import format_run_line

router = Router(name="start")

WELCOME_MESSAGE = """
<b>Welcome to Nuzdex!</b>

Track your Nuzlocke runs right here on Telegram.

<b>What can you do?</b>
- Keep one run per game you are playing
- Log every encounter and capture in a per-run Pokédex
- Manage your party of up to six Pokémon
- Look up any Pokémon with the sections you care about

<b>Quick Start:</b>
1. /games to see game ids
2. /newrun scarlet-violet My Nuzlocke --active
3. /caught 25 pikachu @ Route 1
4. /addparty 25 pikachu 5

<b>Need help?</b> Use /help to see all commands.
"""

HELP_MESSAGE = """
<b>Runs</b>
/runs — List your runs (activate or delete)
/newrun [game] [name] [--active] — Create a run
/active — Show the active run
/editrun [n] name|desc|game [value] — Edit run n from /runs
/games — Game ids

<b>Pokédex</b> (active run)
/dex — Progress
/dexlist [seen|caught|owned] — Entries
/seen, /caught, /owned [dex#] [name] [@ location] [| notes]
/dexdel [dex#] — Remove an entry

<b>Party</b> (active run, slots 1-6)
/party — Show party
/addparty [dex#] [name] [level] [slot] (no arguments: step by step)
/swap [slot] [slot] — Swap two slots
/level [slot] [level], /nick [slot] [name]
/faint [slot], /revive [slot], /release [slot]
/moves [slot] [move, move, ...] — Up to four moves
/ivs [slot], /evs [slot] [hp atk def spa spd spe]
/setinfo [slot] nature|ability|item|gender|shiny|notes [value] (- clears)
/cancel — Stop a step-by-step command

<b>Browse</b>
/poke [name or dex#] — Pokémon details
/sections — Choose detail sections
/game [id|all] — Filter moves by game
"""


@router.message(CommandStart())
async def cmd_start(message: Message, session: AsyncSession, user_id: str | None) -> None:
    """Greet the user and show the active run, if any."""
    text = WELCOME_MESSAGE
    run = await get_active_run(session, user_id)
    if run is not None:
        text += f"\n<b>Active run:</b>\n{format_run_line(1, run)}"
    await message.answer(text)


@router.message(Command("help"))
async def cmd_help(message: Message) -> None:
    """List all commands."""
    await message.answer(HELP_MESSAGE)
