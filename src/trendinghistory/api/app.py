"""FastAPI application entrypoint."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.responses import HTMLResponse

from trendinghistory.api.routes import router

INDEX_HTML = """
<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>NeoDB Trending History</title>
    <style>
      body {
        font-family: system-ui, -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif;
        margin: 40px auto;
        max-width: 720px;
        color: #2b2b2b;
      }
      code { background: #f2f2f2; padding: 2px 4px; border-radius: 4px; }
    </style>
  </head>
  <body>
    <h1>NeoDB Trending History</h1>
    <p>Archived trending listings from federated catalog instances.</p>
    <ul>
      <li><code>GET /api/instances</code> configured instances</li>
      <li><code>GET /api/categories</code> trending categories</li>
      <li><code>GET /api/instances/{slug}/readme/{yyyy}/{mm}/{dd}</code> daily log</li>
      <li><code>POST /api/runs</code> fetch trending listings now</li>
    </ul>
  </body>
</html>
"""


def create_app() -> FastAPI:
    app = FastAPI(title="NeoDB Trending History")
    app.include_router(router, prefix="/api")

    @app.get("/", response_class=HTMLResponse)
    async def index() -> str:
        return INDEX_HTML

    return app


app = create_app()
