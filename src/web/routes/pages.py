"""
Page routes for the Video AI Detection web interface.

A single self-contained page: live preview, path entry, start/stop/replay,
class policy selection and a notification feed polled from the API.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter()

INDEX_HTML = """<!doctype html>
<html>
<head>
  <meta charset="utf-8">
  <title>Video AI Detection</title>
  <style>
    body { font-family: sans-serif; margin: 1.5em; background: #111; color: #eee; }
    img { width: 900px; max-width: 100%; background: #000; display: block; margin-top: 1em; }
    input[type=text] { width: 32em; }
    #notes div { margin: .2em 0; }
  </style>
</head>
<body>
  <h2>Video AI Detection</h2>
  <input id="path" type="text" placeholder="/path/to/video.mp4">
  <button onclick="act('start', {path: val()})">Start</button>
  <button onclick="act('replay', val() ? {path: val()} : null)">Replay</button>
  <button onclick="act('stop')">Stop</button>
  <label><input type="radio" name="policy" value="humans_only" onchange="setPolicy(this.value)"> Humans only</label>
  <label><input type="radio" name="policy" value="all_except_humans" onchange="setPolicy(this.value)"> All objects except humans</label>
  <label><input type="radio" name="policy" value="none" onchange="setPolicy(this.value)"> None</label>
  <span id="state"></span>
  <img src="/api/video/live.mjpg" alt="live preview">
  <div id="notes"></div>
<script>
let lastId = 0;
const val = () => document.getElementById('path').value.trim();
async function act(name, body) {
  const r = await fetch('/api/session/' + name, {method: 'POST',
    headers: {'Content-Type': 'application/json'}, body: body ? JSON.stringify(body) : null});
  const data = await r.json();
  if (!r.ok) alert(data.detail);
}
async function setPolicy(mode) {
  await fetch('/api/policy', {method: 'PUT', headers: {'Content-Type': 'application/json'},
    body: JSON.stringify({mode})});
}
async function poll() {
  const s = await (await fetch('/api/session')).json();
  document.getElementById('state').textContent = s.state + (s.path ? ' - ' + s.path : '');
  const n = await (await fetch('/api/notifications?since=' + lastId)).json();
  for (const item of n.notifications) {
    const d = document.createElement('div');
    d.textContent = new Date(item.timestamp * 1000).toLocaleTimeString() + '  ' + item.message;
    document.getElementById('notes').prepend(d);
  }
  lastId = n.last_id;
}
fetch('/api/policy').then(r => r.json()).then(p => {
  document.querySelectorAll('input[name=policy]').forEach(e => {
    e.checked = e.value === p.mode; e.disabled = p.locked; });
});
setInterval(poll, 1000);
</script>
</body>
</html>
"""


@router.get("/", response_class=HTMLResponse)
def index():
    """Serve the single-page control surface."""
    return HTMLResponse(content=INDEX_HTML)
