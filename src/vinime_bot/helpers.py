"""
Message formatting and inline keyboards for vinime-bot.

All text is rendered for Telegram's HTML parse mode. Callback data follows
the ``NAME|arg|arg`` convention parsed by the handlers in
:mod:`vinime_bot.commands`; long values go through a
:class:`~vinime_bot.links.LinkRegistry` first.
"""
from typing import List, Sequence, Tuple

from telethon import Button

from .constants import (
    AZ_PER_PAGE,
    EPISODES_PER_ROW,
    GENRES_PER_ROW,
    MAX_EPISODE_BUTTONS,
    MAX_TITLE_LENGTH,
    PER_PAGE,
    SYNOPSIS_MAX_LENGTH,
)
from .links import LinkRegistry
from .models import AnimeDetail, CatalogEntry, EpisodeRef, GenreAnimeItem, GenreRef, ListItem
from .utils import escape_html, paginate, truncate

# Listing prefixes: callback prefix -> (header, emoji)
LISTINGS = {
    "latest": ("🆕 <b>Anime Terbaru:</b>", "🆕"),
    "rec": ("⭐ <b>Anime Rekomendasi:</b>", "⭐"),
    "movie": ("🎥 <b>Daftar Movie Anime:</b>", "🎥"),
}

CARI_USAGE = (
    "🔍 Gunakan format:\n<code>/cari judul anime</code>\n\n"
    "Contoh: <code>/cari naruto</code>"
)
EMPTY_AZ_MESSAGE = (
    "📋 <b>Daftar anime masih kosong.</b>\n\n"
    "Gunakan <code>/cari</code> untuk mencari anime terlebih dahulu.\n"
    "Setiap pencarian akan otomatis menambah daftar A-Z!\n\n"
    "Contoh: <code>/cari naruto</code>"
)


def callback(*parts: object) -> bytes:
    """Join callback parts with ``|``."""
    return "|".join(str(p) for p in parts).encode("utf-8")


def button_label(num: int, title: str) -> str:
    return f"{num}. {(title or 'Tanpa Judul')[:MAX_TITLE_LENGTH]}"


def menu_row() -> List[Button]:
    return [Button.inline("🏠 Menu Utama", b"MENU")]


def welcome_message() -> str:
    return (
        "🎌 <b>Selamat datang di VinimeBot!</b>\n\n"
        "Bot ini membantu kamu menemukan dan menonton anime favorit. 🍿\n\n"
        "📌 <b>Menu:</b>\n"
        "🆕 /terbaru - Anime terbaru\n"
        "⭐ /rekomendasi - Anime rekomendasi\n"
        "🎥 /movie - Daftar movie\n"
        "📋 /list - Daftar anime A-Z\n"
        "🎭 /genre - Jelajahi genre\n"
        "🔍 /cari &lt;judul&gt; - Cari anime\n\n"
        "Atau gunakan tombol di bawah ini 👇"
    )


def main_menu_keyboard() -> List[List[Button]]:
    return [
        [Button.inline("🆕 Terbaru", b"CMD|latest"), Button.inline("⭐ Rekomendasi", b"CMD|rec")],
        [Button.inline("🎥 Movie", b"CMD|movie"), Button.inline("📋 Daftar A-Z", b"CMD|az")],
        [Button.inline("🎭 Genre", b"CMD|genre"), Button.inline("🔍 Cari Anime", b"CMD|search")],
    ]


def format_anime_list(items: Sequence[ListItem], page: int = 0, emoji: str = "🎬") -> str:
    """Numbered list of one page of ``items``.

    Args:
        items: Full result list.
        page: Zero-based page index (clamped).
        emoji: Line prefix.

    Returns:
        HTML text ending with the page indicator.
    """
    if not items:
        return "😔 Tidak ada anime ditemukan."
    page_items, page, total_pages = paginate(items, page, PER_PAGE)
    start = page * PER_PAGE
    lines = []
    for idx, item in enumerate(page_items):
        title = escape_html(item.title or "Tanpa Judul")
        ep = f" | {escape_html(item.last_episode_label)}" if item.last_episode_label else ""
        lines.append(f"{emoji} <b>{start + idx + 1}. {title}</b>{ep}")
    lines.append("")
    lines.append(f"📄 <i>Halaman {page + 1} dari {total_pages}</i> ({len(items)} anime)")
    return "\n".join(lines)


def _nav_row(page: int, total_pages: int, make_data) -> List[Button]:
    row = []
    if page > 0:
        row.append(Button.inline("◀️ Prev", make_data(page - 1)))
    if page < total_pages - 1:
        row.append(Button.inline("Next ▶️", make_data(page + 1)))
    return row


def anime_list_keyboard(
    items: Sequence[ListItem],
    page: int,
    prefix: str,
    links: LinkRegistry,
    search_key: str = "",
) -> List[List[Button]]:
    """One button per anime on the page, pagination and the menu button.

    Args:
        items: Full result list.
        page: Zero-based page index (clamped).
        prefix: ``latest``, ``rec``, ``movie`` or ``search``.
        links: Registry for URL and query keys.
        search_key: Registry key of the query when ``prefix`` is ``search``.
    """
    if not items:
        return [menu_row()]
    page_items, page, total_pages = paginate(items, page, PER_PAGE)
    start = page * PER_PAGE
    rows = [
        [Button.inline(button_label(start + idx + 1, item.title), callback("DETAIL", links.key_for(item.url)))]
        for idx, item in enumerate(page_items)
    ]
    if prefix == "search":
        nav = _nav_row(page, total_pages, lambda n: callback("SEARCH", n, search_key))
    else:
        nav = _nav_row(page, total_pages, lambda n: callback("PAGE", prefix, n))
    if nav:
        rows.append(nav)
    rows.append(menu_row())
    return rows


def format_az_list(entries: Sequence[CatalogEntry], page: int = 0) -> str:
    page_items, page, total_pages = paginate(entries, page, AZ_PER_PAGE)
    start = page * AZ_PER_PAGE
    lines = [f"📋 <b>Daftar Anime A-Z ({len(entries)} anime):</b>", ""]
    for idx, entry in enumerate(page_items):
        lines.append(f"{start + idx + 1}. {escape_html(entry.title)}")
    lines.append("")
    lines.append(f"📄 <i>Halaman {page + 1} dari {total_pages}</i>")
    return "\n".join(lines)


def az_keyboard(entries: Sequence[CatalogEntry], page: int, links: LinkRegistry) -> List[List[Button]]:
    page_items, page, total_pages = paginate(entries, page, AZ_PER_PAGE)
    start = page * AZ_PER_PAGE
    rows = [
        [Button.inline(button_label(start + idx + 1, entry.title), callback("DETAIL", links.key_for(entry.url)))]
        for idx, entry in enumerate(page_items)
    ]
    if total_pages > 1:
        nav = []
        if page > 0:
            nav.append(Button.inline("◀️ Prev", callback("AZ", page - 1)))
        nav.append(Button.inline(f"{page + 1}/{total_pages}", b"NOOP"))
        if page < total_pages - 1:
            nav.append(Button.inline("Next ▶️", callback("AZ", page + 1)))
        rows.append(nav)
    rows.append(menu_row())
    return rows


def format_detail(detail: AnimeDetail) -> str:
    """Caption for the detail view."""
    genres = ", ".join(escape_html(g) for g in detail.genres) or "-"
    synopsis = escape_html(truncate(detail.synopsis or "Sinopsis tidak tersedia.", SYNOPSIS_MAX_LENGTH))
    return (
        f"🎬 <b>{escape_html(detail.title or 'Tanpa Judul')}</b>\n\n"
        f"⭐ <b>Score:</b> {escape_html(detail.rating or '-')}\n"
        f"📺 <b>Status:</b> {escape_html(detail.status or '-')}\n"
        f"🎥 <b>Studio:</b> {escape_html(detail.studio or '-')}\n"
        f"📅 <b>Rilis:</b> {escape_html(detail.release_date or '-')}\n"
        f"📝 <b>Episode:</b> {escape_html(detail.total_episode_label or '-')}\n"
        f"🏷️ <b>Genre:</b> {genres}\n\n"
        f"📖 <b>Sinopsis:</b>\n{synopsis}"
    )


def detail_keyboard(anime_key: str, has_episodes: bool) -> List[List[Button]]:
    rows = []
    if has_episodes:
        rows.append([Button.inline("▶️ Tonton", callback("EPS", anime_key))])
    rows.append(menu_row())
    return rows


def format_episode_list(detail: AnimeDetail) -> str:
    total = len(detail.episodes)
    text = f"📺 <b>Daftar Episode: {escape_html(detail.title)}</b>\n\nTotal: {total} episode"
    if total > MAX_EPISODE_BUTTONS:
        text += f"\n<i>Menampilkan {MAX_EPISODE_BUTTONS} episode terbaru</i>"
    return text


def episode_keyboard(episodes: Sequence[EpisodeRef], anime_key: str) -> List[List[Button]]:
    """Buttons for the newest episodes, ``EPISODES_PER_ROW`` per row.

    Episode pages list the newest episode first, so the first
    ``MAX_EPISODE_BUTTONS`` entries are the newest.
    """
    buttons = [
        Button.inline(truncate(ep.label, 20) or f"Ep {idx + 1}", callback("EPNAV", anime_key, idx))
        for idx, ep in enumerate(episodes[:MAX_EPISODE_BUTTONS])
    ]
    rows = [buttons[i:i + EPISODES_PER_ROW] for i in range(0, len(buttons), EPISODES_PER_ROW)]
    rows.append([Button.inline("🔙 Detail", callback("DETAIL", anime_key))] + menu_row())
    return rows


def episode_nav_keyboard(anime_key: str, idx: int, total: int) -> List[List[Button]]:
    """Previous/next episode buttons around episode ``idx``.

    Index 0 is the newest episode, so "previous" moves to a higher index.
    """
    nav = []
    if idx < total - 1:
        nav.append(Button.inline("◀️ Ep Sebelumnya", callback("EPNAV", anime_key, idx + 1)))
    if idx > 0:
        nav.append(Button.inline("Ep Berikutnya ▶️", callback("EPNAV", anime_key, idx - 1)))
    rows = [nav] if nav else []
    rows.append([Button.inline("📋 Daftar Episode", callback("EPS", anime_key))] + menu_row())
    return rows


def format_link_lines(entries: Sequence[Tuple[str, str, str]]) -> str:
    """Bullet list of ``(provider, resolution, url)`` links."""
    return "\n".join(
        f'• <a href="{escape_html(url)}">{escape_html(provider or "Link")} ({escape_html(reso)})</a>'
        for provider, reso, url in entries
    )


def genre_keyboard(genres: Sequence[GenreRef]) -> List[List[Button]]:
    buttons = [Button.inline(g.name, callback("GENRE", g.slug, 1)) for g in genres]
    rows = [buttons[i:i + GENRES_PER_ROW] for i in range(0, len(buttons), GENRES_PER_ROW)]
    rows.append(menu_row())
    return rows


def format_genre_listing(items: Sequence[GenreAnimeItem], slug: str, current: int, total: int) -> str:
    name = escape_html(slug.replace("-", " ").title())
    if not items:
        return f"🎭 <b>Genre: {name}</b>\n\n😔 Tidak ada anime ditemukan."
    lines = [f"🎭 <b>Genre: {name}</b> (Halaman {current}/{total})", ""]
    for idx, item in enumerate(items):
        status = f" | {escape_html(item.status)}" if item.status else ""
        lines.append(f"{idx + 1}. <b>{escape_html(item.title)}</b> ⭐ {escape_html(item.rating)}{status}")
    return "\n".join(lines)


def genre_listing_keyboard(
    items: Sequence[GenreAnimeItem],
    slug: str,
    current: int,
    total: int,
    links: LinkRegistry,
) -> List[List[Button]]:
    """Detail buttons plus the 1-based genre pager."""
    rows = [
        [Button.inline(button_label(idx + 1, item.title), callback("DETAIL", links.key_for(item.url)))]
        for idx, item in enumerate(items)
    ]
    nav = []
    if current > 1:
        nav.append(Button.inline("◀️ Prev", callback("GENRE", slug, current - 1)))
    nav.append(Button.inline(f"{current}/{total}", b"NOOP"))
    if current < total:
        nav.append(Button.inline("Next ▶️", callback("GENRE", slug, current + 1)))
    rows.append(nav)
    rows.append([Button.inline("🎭 Daftar Genre", b"CMD|genre")] + menu_row())
    return rows
