from __future__ import annotations

import discord

from shared.announcements.models import NotificationSpec, TitleSpec
from shared.markup.translator import first_color, strip_all_markup, translate_legacy_to_canonical


def _plain(text: str) -> str:
    return strip_all_markup(translate_legacy_to_canonical(text)).strip()


def _color_for(text: str, fallback: discord.Color) -> discord.Color:
    rgb = first_color(text)
    if rgb is None:
        return fallback
    return discord.Color.from_rgb(*rgb)


def notification_embed(spec: NotificationSpec) -> discord.Embed:
    embed = discord.Embed(
        title=_plain(spec.title) or None,
        description=_plain(spec.subtitle) or None,
        color=_color_for(spec.title, discord.Color.blurple()),
    )
    if spec.has_icon and spec.icon.startswith(("http://", "https://")):
        embed.set_thumbnail(url=spec.icon)
    return embed


def title_embed(spec: TitleSpec) -> discord.Embed:
    embed = discord.Embed(
        title=_plain(spec.title) or None,
        description=_plain(spec.subtitle) or None,
        color=discord.Color.gold() if spec.is_major else _color_for(
            spec.title, discord.Color.blurple()
        ),
    )
    if spec.is_major:
        embed.set_footer(text="Major announcement")
    return embed
