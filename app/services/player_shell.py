"""
Player shell generation

Builds the HTML page that hosts a SCO in an iframe and exposes the SCORM 1.2
``window.API`` object the content talks to. The shim keeps values in a local
cache, seeds it from ``/runtime/{attempt}/initialize`` and posts the whole
cache to ``/runtime/{attempt}/commit`` on ``LMSCommit``.
"""

import html
import json
from typing import Optional
from urllib.parse import quote

CONTENT_PREFIX = "/content"

CONTENT_SECURITY_POLICY = (
    "default-src 'self'; script-src 'self' 'unsafe-inline'; "
    "style-src 'self' 'unsafe-inline'; img-src 'self' data: blob:; "
    "media-src 'self' blob:; font-src 'self' data:; frame-src 'self'; "
    "connect-src 'self';"
)


def build_launch_url(base_path: str, href: str, parameters: Optional[str] = None) -> str:
    """
    Build the URL the iframe loads.

    Args:
        base_path: Package directory relative to the content root
        href: Launch href from the manifest (may carry its own query string)
        parameters: Optional item parameters appended as a query string
    """
    path, sep, query = href.partition("?")
    url = f"{CONTENT_PREFIX}/{quote(base_path.strip('/'))}/{quote(path.lstrip('/'))}"
    if sep:
        url = f"{url}?{query}"
    if parameters:
        params = parameters.lstrip("?&")
        if params:
            url = f"{url}{'&' if '?' in url else '?'}{params}"
    return url


def _js_string(value: str) -> str:
    return json.dumps(value).replace("</", "<\\/")


def render_player_shell(attempt_id: str, launch_url: str) -> str:
    """Render the player page for one attempt."""
    attempt_html = html.escape(attempt_id)
    launch_html = html.escape(launch_url, quote=True)
    attempt_js = _js_string(attempt_id)
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8"/>
  <title>SCORM Player</title>
  <meta http-equiv="Content-Security-Policy" content="{CONTENT_SECURITY_POLICY}"/>
  <style>
    html,body,iframe{{height:100%;width:100%;margin:0;padding:0;border:0}}
    .bar{{position:fixed;top:0;left:0;right:0;height:36px;background:#eee;border-bottom:1px solid #ddd;display:flex;align-items:center;padding:0 8px;z-index:2}}
    iframe{{position:absolute;top:36px;left:0;right:0;bottom:0}}
  </style>
</head>
<body>
<div class="bar">Attempt {attempt_html} &bull; <button onclick="window.APICommit()">Commit</button> <span id="status"></span></div>
<iframe id="sco" src="{launch_html}"></iframe>
<script>
(function(){{
  const cache = {{}};
  const attemptId = {attempt_js};

  async function post(path, body){{
    const res = await fetch(`/runtime/${{attemptId}}/${{path}}`, {{
      method: "POST",
      headers: {{"content-type": "application/json"}},
      body: JSON.stringify(body || {{}})
    }});
    return res.json().catch(() => ({{}}));
  }}

  async function initializeFromServer(){{
    try {{
      const j = await post("initialize");
      if (j && j.values && typeof j.values === "object") {{
        Object.assign(cache, j.values);
      }}
    }} catch (e) {{ console.warn("init failed", e); }}
  }}

  window.API = {{
    LMSInitialize(arg){{ return "true"; }},
    LMSFinish(arg){{ post("commit", cache).then(() => post("finish")); return "true"; }},
    LMSGetValue(el){{ return (el in cache) ? String(cache[el]) : ""; }},
    LMSSetValue(el, v){{ cache[el] = String(v); return "true"; }},
    LMSCommit(arg){{
      post("commit", cache).then(() => {{
        const s = document.getElementById("status");
        if (s) {{ s.textContent = "saved"; setTimeout(() => s.textContent = "", 1200); }}
      }});
      return "true";
    }},
    LMSGetLastError(){{ return "0"; }},
    LMSGetErrorString(c){{ return "No error"; }},
    LMSGetDiagnostic(c){{ return ""; }}
  }};

  initializeFromServer();
  window.APICommit = () => window.API.LMSCommit("");
}})();
</script>
</body>
</html>
"""
