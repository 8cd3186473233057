from __future__ import annotations

import asyncio
from collections.abc import Callable

from aiohttp import web

from sapphire_relay.data.snapshot_store import SnapshotStore
from sapphire_relay.infra.log import get_logger


HTML = """<!doctype html><html><head><meta charset='utf-8'><title>Sapphire Relay</title></head>
<body style='font-family:system-ui;background:#060b16;color:#dbe4ff;padding:16px'>
<h2>Sapphire Relay</h2>
<p style='color:#ff8080'>Do not close the relay while funds are moving. The secret below controls them: never share it.</p>
<pre id='secret' style='color:#ffb0b0'></pre>
<pre id='out'>loading...</pre>
<script>
async function tick(){
  try{
    const r=await fetch('/api',{cache:'no-store'});
    const j=await r.json();
    if(j.secret){document.getElementById('secret').textContent='SECRET '+j.secret.kind+': '+j.secret.value;}
    const view=Object.assign({},j);delete view.secret;
    document.getElementById('out').textContent=JSON.stringify(view,null,2);
  }catch(e){document.getElementById('out').textContent='dashboard error: '+e;}
}
setInterval(tick,2000);tick();
</script>
</body></html>"""


def build_app(store: SnapshotStore, secret_provider: Callable[[], dict | None] | None = None) -> web.Application:
    async def handle_html(_req: web.Request) -> web.Response:
        return web.Response(text=HTML, content_type="text/html")

    async def handle_api(_req: web.Request) -> web.Response:
        data = store.read()
        secret = secret_provider() if secret_provider is not None else None
        if secret is not None:
            data["secret"] = secret
        return web.json_response(data, headers={"Cache-Control": "no-store"})

    app = web.Application()
    app.router.add_get("/", handle_html)
    app.router.add_get("/api", handle_api)
    return app


async def run_dashboard(
    *,
    data_dir: str,
    host: str = "127.0.0.1",
    port: int,
    log_level: str = "INFO",
    secret_provider: Callable[[], dict | None] | None = None,
) -> None:
    """Serve the snapshot file plus the in-memory secret, same process as the relay."""
    log = get_logger("sapphire-relay-dashboard", log_level)
    runner = web.AppRunner(build_app(SnapshotStore(data_dir), secret_provider))
    await runner.setup()
    try:
        site = web.TCPSite(runner, host, port)
        await site.start()
        log.info("dashboard running on %s:%s", host, port)
        while True:
            await asyncio.sleep(3600)
    finally:
        await runner.cleanup()
