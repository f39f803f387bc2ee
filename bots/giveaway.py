import asyncio
import logging
from typing import Final

import boto3
import discord
from discord import app_commands
from discord.ext import tasks

from bots.config import (
    DEFAULT_BOARD_REFRESH_SECONDS,
    DEFAULT_VIEW_TIMEOUT_SECONDS,
    BotSettings,
    ShadowConfig,
    env_int,
    read_shadow_config,
)
from bots.shadow import ShadowReporter
from giveaway_engine.channels import CHANNELS, DISPATCH_COPY, channel_name
from giveaway_engine.config import read_engine_config
from giveaway_engine.cooldown import SHARE_STATE_COOLDOWN, share_status
from giveaway_engine.models import (
    PHASE_FINISHED,
    PHASE_RUNNING,
    PHASE_SELECTING_WINNER,
)
from giveaway_engine.seed import load_demo_store
from giveaway_engine.status import TAB_ACTIVE, TAB_EXPIRED, status_label
from giveaway_engine.storage import dynamo_ledger_factory
from giveaway_engine.store import GiveawayCard, GiveawayStore
from giveaway_engine.validation import (
    GiveawayNotFoundError,
    InvalidTimestampError,
    parse_timestamp,
)
from giveaway_engine.verification import (
    NOT_RUNNING_NOTICE,
    OUTCOME_COMMITTED,
    OUTCOME_DUPLICATE,
    VerificationGate,
)

GIVEAWAY_CHANNEL_ID: int | None = env_int("GIVEAWAY_CHANNEL_ID")
VIEW_TIMEOUT_SECONDS: int = DEFAULT_VIEW_TIMEOUT_SECONDS
MAX_EMBEDS_PER_MESSAGE: Final[int] = 10

intents = discord.Intents.default()
intents.guilds = True
bot = discord.Client(intents=intents)
tree = app_commands.CommandTree(bot)

_shadow_config = read_shadow_config(default_enabled=False)
shadow_reporter = ShadowReporter(bot, _shadow_config)

store = GiveawayStore(config=read_engine_config())

log = logging.getLogger("giveaway-bot")

_board_message_id: int | None = None

_PHASE_COLOURS = {
    PHASE_RUNNING: discord.Colour.green(),
    PHASE_SELECTING_WINNER: discord.Colour.blue(),
    PHASE_FINISHED: discord.Colour.light_grey(),
}


def _relative_timestamp(raw: str) -> str | None:
    try:
        ts = int(parse_timestamp(raw).timestamp())
    except InvalidTimestampError:
        return None
    return f"<t:{ts}:R>"


def describe_deadline(card: GiveawayCard) -> str:
    if card.phase == PHASE_FINISHED:
        return "Finished"
    if card.phase == PHASE_SELECTING_WINNER or card.countdown.is_ended:
        return "Entries closed, selecting winner"
    text = f"Expires in {card.countdown.format()}"
    relative = _relative_timestamp(card.giveaway.ends_at)
    if relative:
        text += f" ({relative})"
    if card.countdown.is_urgent:
        text = f"⏰ {text}"
    return text


def build_giveaway_embed(card: GiveawayCard) -> discord.Embed:
    giveaway = card.giveaway
    embed = discord.Embed(
        title=giveaway.title,
        description=giveaway.prize,
        colour=_PHASE_COLOURS.get(card.phase, discord.Colour.default()),
    )
    embed.add_field(name="Status", value=status_label(card.phase), inline=True)
    embed.add_field(name="Entries", value=f"{giveaway.total_entries:,}", inline=True)
    embed.add_field(
        name="Participants", value=f"{giveaway.total_participants:,}", inline=True
    )
    embed.add_field(name="Deadline", value=describe_deadline(card), inline=False)
    if giveaway.user_entries:
        rank = f"#{giveaway.user_rank}" if giveaway.user_rank else "unranked"
        embed.add_field(
            name="Your Entries",
            value=f"{giveaway.user_entries} (rank {rank})",
            inline=False,
        )
    if giveaway.winner is not None:
        embed.add_field(
            name="Winner",
            value=f"🏆 {giveaway.winner.name} with {giveaway.winner.entries} entries",
            inline=False,
        )
    if giveaway.firm:
        embed.set_footer(text=f"{giveaway.giveaway_id} · {giveaway.firm}")
    else:
        embed.set_footer(text=giveaway.giveaway_id)
    return embed


def build_board_embed(cards: list[GiveawayCard]) -> discord.Embed:
    embed = discord.Embed(title="🎁 Free Giveaways", colour=discord.Colour.blurple())
    if not cards:
        embed.description = "No giveaways right now. Check back soon!"
        return embed
    embed.description = "Use `/share <giveaway>` to earn entries. Share = +1 entry!"
    for card in cards[:25]:
        giveaway = card.giveaway
        value = (
            f"{giveaway.prize}\n{describe_deadline(card)}\n"
            f"{giveaway.total_entries:,} entries · "
            f"{giveaway.total_participants:,} participants"
        )
        if giveaway.winner is not None:
            value += f"\nWinner: {giveaway.winner.name}"
        embed.add_field(
            name=f"[{status_label(card.phase)}] {giveaway.title}",
            value=value,
            inline=False,
        )
    return embed


class ChannelButton(discord.ui.Button["ShareFlowView"]):
    def __init__(self, channel_id: str, *, label: str, disabled: bool, row: int) -> None:
        super().__init__(
            label=label,
            style=discord.ButtonStyle.blurple,
            disabled=disabled,
            row=row,
        )
        self.channel_id = channel_id

    async def callback(self, interaction: discord.Interaction) -> None:
        if self.view is None:
            return
        await handle_channel_share(interaction, self.view, self.channel_id)


class ShareFlowView(discord.ui.View):
    """Ephemeral share dialog for one user and one giveaway."""

    def __init__(
        self,
        gate: VerificationGate,
        giveaway_store: GiveawayStore,
        user_id: str,
        *,
        timeout: float | None = DEFAULT_VIEW_TIMEOUT_SECONDS,
    ) -> None:
        super().__init__(timeout=timeout)
        self.gate = gate
        self.store = giveaway_store
        self.user_id = user_id
        self.channel_buttons: dict[str, ChannelButton] = {}
        for idx, channel in enumerate(CHANNELS):
            button = ChannelButton(
                channel.channel_id, label=channel.name, disabled=False, row=idx // 4
            )
            self.channel_buttons[channel.channel_id] = button
            self.add_item(button)
        self.refresh_buttons()

    def refresh_buttons(self) -> None:
        ledger = self.store.ledger(self.user_id)
        now = self.store.clock.now()
        pending = set(self.gate.pending_channels)
        for channel in CHANNELS:
            button = self.channel_buttons[channel.channel_id]
            status = share_status(ledger, self.gate.giveaway_id, channel.channel_id, now)
            if channel.channel_id in pending:
                button.label = f"✅ {channel.name}"
                button.style = discord.ButtonStyle.green
                button.disabled = True
            elif status.state == SHARE_STATE_COOLDOWN:
                button.label = f"{channel.icon} {channel.name} · {status.hours_until_next}h"
                button.style = discord.ButtonStyle.grey
                button.disabled = True
            else:
                button.label = f"{channel.icon} {channel.name}"
                button.style = discord.ButtonStyle.blurple
                button.disabled = False

    def render_content(self) -> str:
        giveaway = self.store.get(self.gate.giveaway_id)
        lines = [
            f"**Share to earn entries: {giveaway.title}**",
            "Share = +1 entry · each platform once every 24h.",
        ]
        if self.gate.pending_entries:
            names = ", ".join(channel_name(cid) for cid in self.gate.pending_channels)
            lines.append(
                f"Pending: {self.gate.pending_entries} "
                f"({names}). Confirm once your posts are live."
            )
        return "\n".join(lines)

    @discord.ui.button(label="I've shared, confirm", style=discord.ButtonStyle.green, row=2)
    async def confirm(
        self, interaction: discord.Interaction, _: discord.ui.Button
    ) -> None:
        await handle_confirm(interaction, self)

    @discord.ui.button(label="Cancel", style=discord.ButtonStyle.grey, row=2)
    async def cancel(
        self, interaction: discord.Interaction, _: discord.ui.Button
    ) -> None:
        await handle_cancel(interaction, self)

    async def on_timeout(self) -> None:
        discarded = self.gate.cancel()
        if discarded:
            log.info(
                "Share flow for %s on %s timed out, discarded %s",
                self.user_id,
                self.gate.giveaway_id,
                ", ".join(discarded),
            )


async def handle_channel_share(
    interaction: discord.Interaction, view: ShareFlowView, channel_id: str
) -> None:
    dispatch = view.gate.share_on_channel(channel_id)
    if not dispatch.allowed or dispatch.target is None:
        view.refresh_buttons()
        await interaction.response.send_message(
            dispatch.notice or "Sharing is not available right now.", ephemeral=True
        )
        return

    view.refresh_buttons()
    await interaction.response.edit_message(content=view.render_content(), view=view)

    target = dispatch.target
    if target.action == DISPATCH_COPY:
        message = f"Copy this for {target.channel.name}:\n```\n{target.payload}\n```\n{target.instructions}"
    else:
        message = f"[Share on {target.channel.name}]({target.payload})\n{target.instructions}"
    try:
        await interaction.followup.send(message, ephemeral=True)
    except discord.DiscordException as exc:
        log.exception("Failed to send share link for %s: %s", channel_id, exc)


async def handle_confirm(interaction: discord.Interaction, view: ShareFlowView) -> None:
    gate = view.gate
    if shadow_reporter.enabled and gate.pending_entries:
        await shadow_reporter.report_commit(
            interaction.guild, view.user_id, gate.giveaway_id, gate.pending_channels
        )
        gate.cancel()
        view.stop()
        await interaction.response.edit_message(
            content="Shares recorded in shadow mode. No entries were added.", view=None
        )
        return

    result = gate.confirm_shares()
    if result.outcome == OUTCOME_DUPLICATE:
        await interaction.response.defer()
        return
    if result.outcome != OUTCOME_COMMITTED:
        await interaction.response.send_message(result.notice, ephemeral=True)
        return

    view.stop()
    card = view.store.card(gate.giveaway_id, view.user_id)
    await interaction.response.edit_message(
        content=result.notice, embed=build_giveaway_embed(card), view=None
    )
    if result.rejected:
        waits = ", ".join(
            f"{channel_name(cid)} ({decision.hours_remaining}h)"
            for cid, decision in result.rejected.items()
        )
        try:
            await interaction.followup.send(
                f"Still cooling down: {waits}", ephemeral=True
            )
        except discord.DiscordException as exc:
            log.exception("Failed to send cooldown notice: %s", exc)


async def handle_cancel(interaction: discord.Interaction, view: ShareFlowView) -> None:
    view.gate.cancel()
    view.stop()
    await interaction.response.edit_message(
        content="Share flow closed. No entries were added.", view=None
    )


async def send_giveaways(interaction: discord.Interaction, tab: str) -> None:
    user_id = str(interaction.user.id)
    cards = store.board(tab, user_id)
    if not cards:
        label = "active" if tab == TAB_ACTIVE else "expired"
        await interaction.response.send_message(
            f"No {label} giveaways right now.", ephemeral=True
        )
        return
    embeds = [build_giveaway_embed(card) for card in cards[:MAX_EMBEDS_PER_MESSAGE]]
    await interaction.response.send_message(embeds=embeds, ephemeral=True)


async def open_share(interaction: discord.Interaction, giveaway_id: str) -> None:
    user_id = str(interaction.user.id)
    try:
        card = store.card(giveaway_id, user_id)
    except GiveawayNotFoundError:
        await interaction.response.send_message(
            f"Unknown giveaway `{giveaway_id}`.", ephemeral=True
        )
        return
    if card.phase != PHASE_RUNNING:
        await interaction.response.send_message(NOT_RUNNING_NOTICE, ephemeral=True)
        return

    gate = store.open_share_flow(user_id, giveaway_id)
    view = ShareFlowView(gate, store, user_id, timeout=VIEW_TIMEOUT_SECONDS)
    await interaction.response.send_message(
        content=view.render_content(),
        embed=build_giveaway_embed(card),
        view=view,
        ephemeral=True,
    )


@tree.command(name="giveaways", description="Browse giveaways and your entries")
@app_commands.describe(tab="Which giveaways to show")
@app_commands.choices(
    tab=[
        app_commands.Choice(name="Active", value=TAB_ACTIVE),
        app_commands.Choice(name="Expired", value=TAB_EXPIRED),
    ]
)
async def giveaways_command(
    interaction: discord.Interaction, tab: str = TAB_ACTIVE
) -> None:
    await send_giveaways(interaction, tab)


@tree.command(name="share", description="Share a giveaway to earn extra entries")
@app_commands.describe(giveaway_id="Giveaway to share")
async def share_command(interaction: discord.Interaction, giveaway_id: str) -> None:
    await open_share(interaction, giveaway_id)


@share_command.autocomplete("giveaway_id")
async def share_autocomplete(
    interaction: discord.Interaction, current: str
) -> list[app_commands.Choice[str]]:
    lowered = current.lower()
    choices = [
        app_commands.Choice(name=card.giveaway.title[:100], value=card.giveaway.giveaway_id)
        for card in store.board(TAB_ACTIVE)
        if lowered in card.giveaway.title.lower() or lowered in card.giveaway.giveaway_id
    ]
    return choices[:25]


async def publish_board() -> None:
    """Re-derive every giveaway for the current instant and update the board."""
    global _board_message_id  # pylint: disable=global-statement

    if GIVEAWAY_CHANNEL_ID is None:
        return
    embed = build_board_embed(store.board(TAB_ACTIVE) + store.board(TAB_EXPIRED))
    if shadow_reporter.enabled:
        log.debug("[SHADOW] board refresh skipped")
        return

    channel = bot.get_channel(GIVEAWAY_CHANNEL_ID)
    if not isinstance(channel, discord.TextChannel):
        log.warning("Giveaway channel not found or not text")
        return

    if _board_message_id is not None:
        try:
            msg = await channel.fetch_message(_board_message_id)
            await msg.edit(embed=embed)
            return
        except discord.NotFound:
            log.info("Board message %s is gone, posting a new one", _board_message_id)
            _board_message_id = None
        except discord.DiscordException as exc:
            log.exception("Failed to refresh giveaway board: %s", exc)
            return

    try:
        msg = await channel.send(embed=embed)
    except discord.DiscordException as exc:
        log.exception("Failed to post giveaway board: %s", exc)
        return
    _board_message_id = msg.id


@tasks.loop(seconds=DEFAULT_BOARD_REFRESH_SECONDS)
async def refresh_board() -> None:
    await publish_board()


@refresh_board.before_loop
async def before_refresh_board() -> None:
    await bot.wait_until_ready()


@bot.event
async def on_ready() -> None:
    await tree.sync()
    if not refresh_board.is_running():
        refresh_board.start()
    mode = "shadow" if shadow_reporter.enabled else "live"
    log.info("Giveaway bot ready as %s (%s mode, %s giveaways)", bot.user, mode, len(store))


def build_store(settings: BotSettings) -> GiveawayStore:
    config = read_engine_config()
    ledger_factory = None
    if settings.share_table_name:
        dynamodb = boto3.resource("dynamodb", region_name=settings.aws_region)
        table = dynamodb.Table(settings.share_table_name)
        ledger_factory = dynamo_ledger_factory(table, config)
    giveaway_store = GiveawayStore(config=config, ledger_factory=ledger_factory)
    if settings.demo_mode:
        load_demo_store(giveaway_store)
    return giveaway_store


def configure_runtime(
    *,
    client: discord.Client | None = None,
    command_tree: app_commands.CommandTree | None = None,
    giveaway_store: GiveawayStore | None = None,
    giveaway_channel_id: int | None = None,
    shadow_enabled: bool | None = None,
    shadow_channel_id: int | None = None,
    board_refresh_seconds: int | None = None,
    view_timeout_seconds: int | None = None,
) -> None:
    """Reconfigure module globals, e.g. for tests or an embedding runtime."""

    global bot, tree, store, shadow_reporter, _shadow_config
    global GIVEAWAY_CHANNEL_ID, VIEW_TIMEOUT_SECONDS

    if client is not None:
        bot = client

    prev_tree = tree
    if command_tree is not None:
        tree = command_tree
    if prev_tree is not tree:
        for command in prev_tree.get_commands():
            if tree.get_command(command.name) is None:
                tree.add_command(command.copy())

    if giveaway_store is not None:
        store = giveaway_store

    if giveaway_channel_id is not None:
        GIVEAWAY_CHANNEL_ID = giveaway_channel_id

    if view_timeout_seconds is not None and view_timeout_seconds > 0:
        VIEW_TIMEOUT_SECONDS = view_timeout_seconds

    if board_refresh_seconds is not None and board_refresh_seconds > 0:
        refresh_board.change_interval(seconds=board_refresh_seconds)

    if shadow_enabled is not None or shadow_channel_id is not None:
        _shadow_config = ShadowConfig(
            enabled=(
                shadow_enabled if shadow_enabled is not None else _shadow_config.enabled
            ),
            channel_id=(
                shadow_channel_id
                if shadow_channel_id is not None
                else _shadow_config.channel_id
            ),
        )

    shadow_reporter = ShadowReporter(bot, _shadow_config)


async def main() -> None:
    settings = BotSettings.load()
    configure_runtime(
        giveaway_store=build_store(settings),
        giveaway_channel_id=settings.giveaway_channel_id,
        board_refresh_seconds=settings.board_refresh_seconds,
        view_timeout_seconds=settings.view_timeout_seconds,
    )
    async with bot:
        await bot.start(settings.discord_token)


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    asyncio.run(main())
