"""Render a ``SearchResultSet`` for people (Markdown) or programs (JSON)."""

import json

from scout.search.models import SearchResultSet

_LINK_SPECIAL = "[]()"


def escape_md_link(text: str) -> str:
    """Backslash-escape characters that would break ``[text](url)``."""
    return "".join("\\" + c if c in _LINK_SPECIAL else c for c in text)


def sanitize_heading(text: str) -> str:
    return text.replace("\r", " ").replace("\n", " ")


def render_markdown(result_set: SearchResultSet) -> str:
    lines = [f"# Research: {sanitize_heading(result_set.query.text)}", ""]

    for lang, text in result_set.answers:
        lines += [f"## Answer ({lang})", "", text.strip(), ""]

    if result_set.degraded_variants:
        langs = ", ".join(v.language for v in result_set.degraded_variants)
        lines += [f"> Some search variants returned no answer: {langs}", ""]

    if result_set.results:
        lines += ["## Sources", ""]
        for i, r in enumerate(result_set.results, 1):
            langs = ", ".join(sorted(r.source_languages))
            lines.append(f"{i}. [{escape_md_link(r.title)}]({r.url})")
            lines.append(
                f"   - languages: {langs} | citations: {r.citation_count}"
                f" | extraction: {r.extraction_status.value}"
            )
            if r.snippet and r.snippet != r.title:
                lines.append(f"   - {sanitize_heading(r.snippet)}")
        lines.append("")
    else:
        lines += ["No sources found.", ""]

    unavailable = [r for r in result_set.results if not r.has_content]
    if unavailable:
        lines += ["## Unavailable sources", ""]
        for r in unavailable:
            lines.append(f"- {r.url} ({r.failure_reason or r.extraction_status.value})")
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def render_json(result_set: SearchResultSet) -> str:
    return json.dumps(result_set.to_dict(), ensure_ascii=False, indent=2)
