import copy
import re
import unittest

import support  # noqa: F401

from resumeflow.schemas.resume import ParsedResume  # noqa: E402
from resumeflow.services.portfolio_renderer import (  # noqa: E402
    THEMES,
    build_stylesheet,
    render_portfolio_html,
    resolve_theme,
    safe_href,
)
from support import SAMPLE_RESUME  # noqa: E402


def _resume(**overrides) -> ParsedResume:
    data = copy.deepcopy(SAMPLE_RESUME)
    data.update(overrides)
    return ParsedResume.model_validate(data)


class PortfolioRendererTests(unittest.TestCase):
    def test_rendering_is_deterministic(self):
        resume = _resume()
        self.assertEqual(render_portfolio_html(resume, "dark"), render_portfolio_html(resume, "dark"))

    def test_dark_theme_uses_dark_palette_only(self):
        html = render_portfolio_html(_resume(), "dark")
        style = re.search(r"<style>(.*?)</style>", html, flags=re.S).group(1)
        self.assertIn(THEMES["dark"]["accent"], style)
        self.assertNotIn(THEMES["light"]["bg"], style)

    def test_unknown_or_missing_theme_falls_back_to_light(self):
        self.assertEqual(resolve_theme(None), "light")
        self.assertEqual(resolve_theme("sepia"), "light")
        self.assertEqual(resolve_theme(" Neutral "), "neutral")
        self.assertIn(THEMES["light"]["accent"], build_stylesheet("sepia"))

    def test_projects_section_omitted_when_empty(self):
        html = render_portfolio_html(_resume(projects=[]), "light")
        self.assertNotIn('<section id="projects">', html)
        self.assertNotIn('class="project-card"', html)

    def test_one_project_card_per_project_in_order(self):
        html = render_portfolio_html(_resume(), "light")
        self.assertEqual(html.count('<section id="projects">'), 1)
        self.assertEqual(html.count('class="project-card"'), 2)
        self.assertLess(html.index("Ledger CLI"), html.index("Rate Limiter"))
        self.assertEqual(html.count('class="project-link"'), 1)

    def test_skills_are_flattened_in_category_order(self):
        html = render_portfolio_html(_resume(), "light")
        tags = re.findall(r'<span class="skill-tag">(.*?)</span>', html)
        self.assertEqual(tags, ["Python", "SQL", "Mentoring", "Docker", "AWS"])

    def test_experience_bullets_render_as_list_items_in_order(self):
        html = render_portfolio_html(_resume(), "light")
        self.assertLess(html.index("Acme Pay"), html.index("Globex"))
        self.assertIn("<li>Reduced API latency by 38% across 120 endpoints.</li>", html)

    def test_contact_block_has_mailto_and_links_in_order(self):
        html = render_portfolio_html(_resume(), "light")
        contact = html[html.index('<section id="contact">'):]
        hrefs = re.findall(r'href="([^"]+)"', contact)
        self.assertEqual(
            hrefs,
            ["mailto:jane@example.com", "https://github.com/janedoe", "https://www.linkedin.com/in/janedoe"],
        )

    def test_resume_content_is_escaped(self):
        data = copy.deepcopy(SAMPLE_RESUME)
        data["personal_info"]["full_name"] = "<script>alert(1)</script>"
        data["professional_summary"] = 'Engineer" onload="steal()'
        data["skills"]["technical"] = ["<img src=x onerror=alert(1)>"]
        data["personal_info"]["links"] = [{"label": "<b>Site</b>", "url": "javascript:alert(1)"}]
        html = render_portfolio_html(ParsedResume.model_validate(data), "light")

        self.assertNotIn("<script>", html)
        self.assertNotIn("<img", html)
        self.assertNotIn("javascript:", html)
        self.assertNotIn('onload="steal()', html)
        self.assertIn("&lt;script&gt;alert(1)&lt;/script&gt;", html)
        self.assertIn("&lt;b&gt;Site&lt;/b&gt;", html)

    def test_document_references_no_external_resources(self):
        html = render_portfolio_html(_resume(), "neutral")
        self.assertNotIn("<link", html)
        self.assertNotIn("<script", html)
        self.assertNotIn("src=", html)
        self.assertNotIn("@import", html)

    def test_safe_href_rules(self):
        self.assertEqual(safe_href("https://example.com/a?b=1&c=2"), "https://example.com/a?b=1&amp;c=2")
        self.assertEqual(safe_href("linkedin.com/in/jane"), "https://linkedin.com/in/jane")
        self.assertEqual(safe_href("java\tscript:alert(1)"), "#")
        self.assertEqual(safe_href("data:text/html,hi"), "#")
        self.assertEqual(safe_href(""), "#")


if __name__ == "__main__":
    unittest.main()
