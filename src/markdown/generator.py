# src/markdown/generator.py — v1
"""Markdown note assembly.

A note is the YAML front matter, the transcription produced by the
provider and an HTML ``<img>`` gallery of the page attachments, joined by
blank lines. Streaming runs write the header first and append the
gallery once the attachments exist.
"""

from __future__ import annotations

from datetime import datetime, timezone

from ink2md.core.models import ConvertedNote, ImageEmbed

FAILURE_PLACEHOLDER = "_LLM generation failed._"
PAGES_HEADING = "## Pages"


def build_front_matter(note: ConvertedNote, now: datetime | None = None) -> str:
    imported = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    lines = [
        "---",
        f"source: {note.source.file_path}",
        f"imported: {imported.isoformat()}",
        f"pages: {len(note.pages)}",
        f"format: {note.source.format}",
        "---",
    ]
    return "\n".join(lines)


def build_pages_section(embeds: list[ImageEmbed]) -> str:
    blocks = [PAGES_HEADING]
    for index, embed in enumerate(embeds, start=1):
        width = f' width="{round(embed.width)}"' if embed.width > 0 else ""
        blocks.append(f'<img src="{embed.path}" alt="Page {index}"{width} />')
    return "\n\n".join(blocks)


def build_markdown(
    note: ConvertedNote,
    ai_markdown: str,
    embeds: list[ImageEmbed],
    now: datetime | None = None,
) -> str:
    """Full note body; a blank transcription is left out."""
    sections = [build_front_matter(note, now)]
    body = ai_markdown.strip()
    if body:
        sections.append(body)
    sections.append(build_pages_section(embeds))
    return "\n\n".join(sections) + "\n"


def build_stream_header(note: ConvertedNote, now: datetime | None = None) -> str:
    return build_front_matter(note, now) + "\n\n"


def build_stream_footer(embeds: list[ImageEmbed]) -> str:
    return "\n\n" + build_pages_section(embeds) + "\n"


def embeds_for(note: ConvertedNote) -> list[ImageEmbed]:
    """Gallery entries for every page, referenced relative to the note."""
    return [ImageEmbed(path=f"./{page.file_name}", width=page.width) for page in note.pages]
