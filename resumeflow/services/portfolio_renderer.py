"""Static portfolio page rendering.

Résumé fields come from the completion provider or straight from the client,
so every value is escaped before it reaches the document and link targets are
restricted to http(s) and mailto.
"""

from __future__ import annotations

import html
import re
from urllib.parse import urlparse

from resumeflow.schemas.resume import ParsedResume

DEFAULT_THEME = "light"

THEMES: dict[str, dict[str, str]] = {
    "light": {
        "bg": "#ffffff",
        "text": "#1a1a1a",
        "text_secondary": "#4a4a4a",
        "accent": "#4f46e5",
        "card_bg": "#f9fafb",
        "border": "#e5e7eb",
    },
    "dark": {
        "bg": "#0f172a",
        "text": "#f8fafc",
        "text_secondary": "#94a3b8",
        "accent": "#818cf8",
        "card_bg": "#1e293b",
        "border": "#334155",
    },
    "neutral": {
        "bg": "#f4f4f5",
        "text": "#27272a",
        "text_secondary": "#52525b",
        "accent": "#18181b",
        "card_bg": "#ffffff",
        "border": "#e4e4e7",
    },
}

_BASE_CSS = """
    * { margin: 0; padding: 0; box-sizing: border-box; }
    body {
      font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif;
      background-color: var(--bg);
      color: var(--text);
      line-height: 1.6;
    }
    .container { max-width: 800px; margin: 0 auto; padding: 4rem 2rem; }
    section { margin-bottom: 5rem; }
    h1, h2, h3 { font-weight: 800; line-height: 1.2; }
    h1 { font-size: 3.5rem; margin-bottom: 1rem; letter-spacing: -0.02em; }
    h2 { font-size: 1.5rem; margin-bottom: 2rem; text-transform: uppercase; letter-spacing: 0.1em; color: var(--accent); }
    p { margin-bottom: 1.5rem; color: var(--text-secondary); font-size: 1.1rem; }
    .hero { padding: 8rem 0 4rem; }
    .hero p { font-size: 1.5rem; max-width: 600px; }
    .skills-grid { display: flex; flex-wrap: wrap; gap: 0.75rem; }
    .skill-tag {
      padding: 0.5rem 1rem;
      background: var(--card-bg);
      border: 1px solid var(--border);
      border-radius: 8px;
      font-size: 0.9rem;
      font-weight: 500;
    }
    .timeline-item { margin-bottom: 3rem; position: relative; padding-left: 2rem; border-left: 2px solid var(--border); }
    .timeline-item:last-child { margin-bottom: 0; }
    .timeline-date { font-size: 0.85rem; font-weight: 700; color: var(--accent); margin-bottom: 0.5rem; }
    .timeline-role { font-size: 1.25rem; font-weight: 700; margin-bottom: 0.25rem; }
    .timeline-company { font-weight: 600; margin-bottom: 1rem; color: var(--text); }
    .timeline-bullets { list-style: none; }
    .timeline-bullets li { margin-bottom: 0.5rem; position: relative; padding-left: 1.25rem; color: var(--text-secondary); font-size: 1rem; }
    .timeline-bullets li::before { content: "\\2192"; position: absolute; left: 0; color: var(--accent); }
    .projects-grid { display: grid; grid-template-columns: 1fr; gap: 2rem; }
    .project-card { padding: 2rem; background: var(--card-bg); border: 1px solid var(--border); border-radius: 16px; }
    .project-title { font-size: 1.25rem; margin-bottom: 0.75rem; }
    .project-link { color: var(--accent); text-decoration: none; font-weight: 600; font-size: 0.9rem; }
    .education-item { margin-bottom: 1.5rem; }
    .education-item h3 { font-size: 1.1rem; }
    .education-item p { margin-bottom: 0; }
    .contact-links { display: flex; gap: 1.5rem; flex-wrap: wrap; }
    .contact-link { color: var(--text); font-weight: 600; text-decoration: none; border-bottom: 2px solid var(--accent); padding-bottom: 2px; }
    @media (max-width: 640px) {
      h1 { font-size: 2.5rem; }
      .container { padding: 2rem 1.5rem; }
    }
"""

_SAFE_SCHEMES = {"http", "https", "mailto"}
_UNSAFE_URL_CHARS = re.compile(r"[\x00-\x20\x7f]")


def resolve_theme(theme: str | None) -> str:
    key = (theme or "").strip().lower()
    return key if key in THEMES else DEFAULT_THEME


def _e(value: str | None) -> str:
    return html.escape(value or "", quote=True)


def safe_href(url: str | None) -> str:
    value = _UNSAFE_URL_CHARS.sub("", url or "")
    if not value:
        return "#"
    scheme = urlparse(value).scheme.lower()
    if not scheme:
        if value.startswith(("/", "#", ".")) or "." not in value:
            return "#"
        value = f"https://{value}"
    elif scheme not in _SAFE_SCHEMES:
        return "#"
    return _e(value)


def build_stylesheet(theme: str) -> str:
    palette = THEMES[resolve_theme(theme)]
    variables = (
        "    :root {\n"
        f"      --bg: {palette['bg']};\n"
        f"      --text: {palette['text']};\n"
        f"      --text-secondary: {palette['text_secondary']};\n"
        f"      --accent: {palette['accent']};\n"
        f"      --card-bg: {palette['card_bg']};\n"
        f"      --border: {palette['border']};\n"
        "    }"
    )
    return variables + _BASE_CSS


def _skills_section(resume: ParsedResume) -> str:
    tags = "".join(f'<span class="skill-tag">{_e(skill)}</span>' for skill in resume.skills.flattened())
    return (
        '        <section id="skills">\n'
        "            <h2>Expertise</h2>\n"
        f'            <div class="skills-grid">{tags}</div>\n'
        "        </section>"
    )


def _experience_section(resume: ParsedResume) -> str:
    items: list[str] = []
    for entry in resume.work_experience:
        bullets = "".join(f"<li>{_e(bullet)}</li>" for bullet in entry.bullet_points)
        items.append(
            '                <div class="timeline-item">\n'
            f'                    <div class="timeline-date">{_e(entry.duration)}</div>\n'
            f'                    <div class="timeline-role">{_e(entry.role)}</div>\n'
            f'                    <div class="timeline-company">{_e(entry.company)}</div>\n'
            f'                    <ul class="timeline-bullets">{bullets}</ul>\n'
            "                </div>"
        )
    body = "\n".join(items)
    return (
        '        <section id="experience">\n'
        "            <h2>Experience</h2>\n"
        '            <div class="timeline">\n'
        f"{body}\n"
        "            </div>\n"
        "        </section>"
    )


def _projects_section(resume: ParsedResume) -> str | None:
    if not resume.projects:
        return None
    cards: list[str] = []
    for project in resume.projects:
        link = ""
        if project.link:
            link = (
                f'\n                    <a href="{safe_href(project.link)}" class="project-link" '
                'target="_blank" rel="noopener noreferrer">View Project &#8599;</a>'
            )
        cards.append(
            '                <div class="project-card">\n'
            f'                    <h3 class="project-title">{_e(project.title)}</h3>\n'
            f"                    <p>{_e(project.description)}</p>{link}\n"
            "                </div>"
        )
    body = "\n".join(cards)
    return (
        '        <section id="projects">\n'
        "            <h2>Featured Projects</h2>\n"
        '            <div class="projects-grid">\n'
        f"{body}\n"
        "            </div>\n"
        "        </section>"
    )


def _education_section(resume: ParsedResume) -> str:
    items = "\n".join(
        '            <div class="education-item">\n'
        f"                <h3>{_e(edu.degree)}</h3>\n"
        f"                <p>{_e(edu.institution)} &bull; {_e(edu.year)}</p>\n"
        "            </div>"
        for edu in resume.education
    )
    return (
        '        <section id="education">\n'
        "            <h2>Education</h2>\n"
        f"{items}\n"
        "        </section>"
    )


def _contact_section(resume: ParsedResume) -> str:
    info = resume.personal_info
    links = [f'<a href="mailto:{_e(info.email)}" class="contact-link">Email</a>']
    for link in info.links:
        links.append(
            f'<a href="{safe_href(link.url)}" class="contact-link" target="_blank" '
            f'rel="noopener noreferrer">{_e(link.label)}</a>'
        )
    joined = "\n                ".join(links)
    return (
        '        <section id="contact">\n'
        "            <h2>Get in Touch</h2>\n"
        '            <div class="contact-links">\n'
        f"                {joined}\n"
        "            </div>\n"
        "        </section>"
    )


def render_portfolio_html(resume: ParsedResume, theme: str | None = DEFAULT_THEME) -> str:
    info = resume.personal_info
    summary = resume.professional_summary
    sections = [
        '        <section class="hero">\n'
        f"            <h1>{_e(info.full_name)}</h1>\n"
        f"            <p>{_e(summary)}</p>\n"
        "        </section>",
        '        <section id="about">\n'
        "            <h2>About</h2>\n"
        f"            <p>{_e(info.location)} &bull; {_e(info.email)}</p>\n"
        "        </section>",
        _skills_section(resume),
        _experience_section(resume),
        _projects_section(resume),
        _education_section(resume),
        _contact_section(resume),
    ]
    body = "\n\n".join(section for section in sections if section)
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        "<head>\n"
        '    <meta charset="UTF-8">\n'
        '    <meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
        f"    <title>{_e(info.full_name)} | Portfolio</title>\n"
        f'    <meta name="description" content="{_e(summary[:160])}">\n'
        f"    <style>\n{build_stylesheet(theme or DEFAULT_THEME)}\n    </style>\n"
        "</head>\n"
        "<body>\n"
        '    <div class="container">\n'
        f"{body}\n"
        "    </div>\n"
        "</body>\n"
        "</html>\n"
    )
