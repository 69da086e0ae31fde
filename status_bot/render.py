"""Status card rendering.

Everything here is pure: the same state, interval and ``now`` always give the
same card. Rounding is half-up (0.5 goes to the next integer) for both the
capacity percentage and the progress bar.
"""
import math
import time
from dataclasses import dataclass
from datetime import datetime, timezone

from .models import RemoteState, PlayerRecord

STATUS_COLOR = 0xF8AB27
ERROR_COLOR = 0xFF0000

BAR_LENGTH = 40
BAR_FILLED = "█"
BAR_EMPTY = "░"

ERROR_DETAIL_LIMIT = 1000


@dataclass(frozen=True)
class EmbedField:
    name: str
    value: str
    inline: bool = False

    def to_dict(self) -> dict:
        return {"name": self.name, "value": self.value, "inline": self.inline}


@dataclass(frozen=True)
class Embed:
    """Destination-agnostic card: title, color, optional description and ordered sections."""

    title: str
    color: int
    fields: tuple[EmbedField, ...] = ()
    description: str = ""
    timestamp: str = ""
    footer_text: str = ""
    footer_icon_url: str = ""

    def field(self, name: str) -> EmbedField | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def to_dict(self) -> dict:
        embed = {
            "title": self.title,
            "color": self.color,
            "fields": [f.to_dict() for f in self.fields],
        }
        if self.description:
            embed["description"] = self.description
        if self.timestamp:
            embed["timestamp"] = self.timestamp
        if self.footer_text:
            embed["footer"] = {"text": self.footer_text}
            if self.footer_icon_url:
                embed["footer"]["icon_url"] = self.footer_icon_url
        return embed


@dataclass(frozen=True)
class CardStyle:
    """Deployment-specific look of the status card."""

    footer_text: str = ""
    footer_icon_url: str = ""
    join_url_template: str = ""


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def capacity_percent(human_count: int, max_capacity: int) -> int:
    return round_half_up(100 * human_count / max(max_capacity, 1))


def progress_bar(human_count: int, max_capacity: int, length: int = BAR_LENGTH) -> str:
    filled = round_half_up(length * human_count / max(max_capacity, 1))
    filled = min(max(filled, 0), length)
    return BAR_FILLED * filled + BAR_EMPTY * (length - filled)


def format_duration(seconds) -> str:
    """3661 -> "1h 1m 1s", 7200 -> "2h", 0, negative or None -> "0s"."""
    if not seconds or seconds < 0:
        return "0s"
    seconds = int(seconds)
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)

    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts)


def _player_sort_key(p: PlayerRecord):
    # score 0: longest connected first; otherwise fastest to the score first
    duration = -p.connected_seconds if p.score == 0 else p.connected_seconds
    return (-p.score, duration)


def sort_players(players) -> list[PlayerRecord]:
    return sorted(players, key=_player_sort_key)


def next_refresh_timestamp(refresh_interval_seconds: int, now: float) -> int:
    return int(now + refresh_interval_seconds)


def _iso(now: float) -> str:
    return datetime.fromtimestamp(now, timezone.utc).isoformat()


def render_status(state: RemoteState, refresh_interval_seconds: int, *, now: float | None = None,
                  style: CardStyle | None = None) -> Embed:
    now = time.time() if now is None else now
    style = style or CardStyle()

    humans, capacity = state.human_count, state.max_capacity
    summary = (
        f"**{humans}/{capacity}** ({capacity_percent(humans, capacity)}%)"
        f" - Refreshing <t:{next_refresh_timestamp(refresh_interval_seconds, now)}:R>"
    )
    if style.join_url_template and state.server_address and state.server_address != "Unknown":
        summary += f"\n[Join Now]({style.join_url_template.format(address=state.server_address)})"

    fields = [
        EmbedField("", progress_bar(humans, capacity)),
        EmbedField("Online Players", summary),
    ]

    if state.bot_count > 0:
        fields.append(EmbedField("Bots", f"{state.bot_count} bot{'s' if state.bot_count != 1 else ''} online", inline=True))
    if state.connecting_count > 0:
        fields.append(EmbedField("Connecting", f"{state.connecting_count} connecting", inline=True))

    players = sort_players(state.named_players)
    if players:
        fields.extend([
            EmbedField("Name", "\n".join(p.name.strip() for p in players), inline=True),
            EmbedField("Score", "\n".join(str(p.score) for p in players), inline=True),
            EmbedField("Time Played", "\n".join(format_duration(p.connected_seconds) for p in players), inline=True),
        ])

    title = state.server_name if state.server_name != "Unknown" else ""
    return Embed(
        title=title,
        color=STATUS_COLOR,
        fields=tuple(fields),
        timestamp=_iso(now),
        footer_text=style.footer_text,
        footer_icon_url=style.footer_icon_url,
    )


def render_error(error: Exception, consecutive_errors: int, *, now: float | None = None) -> Embed:
    now = time.time() if now is None else now
    detail = (str(error) or type(error).__name__)[:ERROR_DETAIL_LIMIT]
    return Embed(
        title="⚠️ Error",
        color=ERROR_COLOR,
        description=f"Failed to fetch server information after {consecutive_errors} consecutive attempts.",
        fields=(
            EmbedField("❌ Error Details", detail),
            EmbedField("🔄 Status", "Monitoring will continue automatically"),
        ),
        timestamp=_iso(now),
    )
